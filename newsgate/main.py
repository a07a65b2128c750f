"""
Main entry point for NewsGate
Provides CLI commands for content lookups and provider health
"""

import json
import sys
import click

from newsgate.config.settings import get_config
from newsgate.utils.logger import get_logger
from newsgate.data import ContentType, NewsGateError, NewsManager

logger = get_logger(__name__)

def _echo_json(data):
    click.echo(json.dumps(data, indent=2, default=str))

@click.group()
def cli():
    """NewsGate financial content CLI"""
    pass

@cli.command()
def status():
    """Check system status and configuration"""
    config = get_config()
    logger.info("NewsGate System Status Check")

    click.echo("\n📋 Configuration Status:")
    click.echo(f"  • Log Level: {config.system.log_level}")
    click.echo(f"  • Cache TTL: {config.cache.ttl_seconds} seconds")
    click.echo(f"  • Cache Dir: {config.cache.cache_dir or 'memory only'}")

    click.echo("\n🔑 API Keys:")
    key_status = "✅ Set" if config.api.api_key else "❌ Missing"
    click.echo(f"  • NewsGate: {key_status}")

    click.echo("\n🔀 Routing:")
    click.echo(f"  • Native endpoint: {config.api.base_url}")
    click.echo(f"  • Analysis endpoint: {config.api.analysis_base_url}")
    click.echo(f"  • Default provider: {config.routing.default_provider}")
    click.echo(f"  • Fallback chain: {', '.join(config.routing.fallback_chain)}")
    click.echo(f"  • Max workers: {config.routing.max_workers}")

    click.echo("\n✅ System check complete!")

@cli.command()
@click.argument('symbol')
@click.option('--source', default='auto', show_default=True, help='Provider name or auto')
@click.option('--type', 'content_type', default=ContentType.NEWS.value, show_default=True,
              type=click.Choice([t.value for t in ContentType]), help='Content type')
@click.option('--timeframe', default='1d', show_default=True, help='Time range (1h, 1d, 7d, 30d)')
@click.option('--limit', default=20, show_default=True, type=int, help='Maximum items')
@click.option('--no-fallback', is_flag=True, help='Do not retry on other providers')
@click.option('--no-cache', is_flag=True, help='Bypass the response cache')
def get(symbol, source, content_type, timeframe, limit, no_fallback, no_cache):
    """Get content for SYMBOL"""
    options = {
        'source': source,
        'type': content_type,
        'timeframe': timeframe,
        'limit': limit,
        'fallback': not no_fallback,
        'cache': not no_cache
    }

    try:
        with NewsManager.from_config() as manager:
            response = manager.get(symbol, options)
    except NewsGateError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(2)

    _echo_json(response.to_dict())
    if not response.successful:
        sys.exit(1)

@cli.command()
@click.argument('symbol')
@click.option('--source', '-s', 'sources', multiple=True, required=True, help='Provider name, repeatable')
@click.option('--type', 'content_type', default=ContentType.NEWS.value, show_default=True,
              type=click.Choice([t.value for t in ContentType]), help='Content type')
@click.option('--timeframe', default='1d', show_default=True, help='Time range (1h, 1d, 7d, 30d)')
def multi(symbol, sources, content_type, timeframe):
    """Query several providers for SYMBOL"""
    with NewsManager.from_config() as manager:
        result = manager.get_from_multiple_sources(
            symbol,
            sources,
            {'type': content_type, 'timeframe': timeframe}
        )

    _echo_json(result)
    click.echo(f"\n📊 {result['success_count']}/{result['total_sources']} sources succeeded", err=True)

@cli.command()
def health():
    """Check health of every registered provider"""
    with NewsManager.from_config() as manager:
        report = manager.get_providers_health()

    click.echo("\n🩺 Provider Health:")
    for name, info in report.items():
        emoji = {"healthy": "🟢", "unhealthy": "🔴"}.get(info['status'], "⚠️")
        line = f"  • {name}: {emoji} {info['status']}"
        if info['status'] == 'error':
            line += f" ({info['error']})"
        elif info['name'] != name:
            line += f" (alias of {info['name']})"
        click.echo(line)

if __name__ == "__main__":
    cli()
