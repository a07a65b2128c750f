"""
External analysis provider
Reads a financial timeline and derives sentiment and event summaries from it
"""

import time
import uuid
from collections import Counter
from typing import Any, Dict, List, Optional

from ...utils import get_logger
from ..base import ContentResponse, ContentType, ProviderAdapter
from ..transport import Transport
from .native import detect_event_type

logger = get_logger(__name__)

TIMELINE_PATH = "/rest/finance/timeline/v2/{symbol}"
TRACE_PATH = "/cdn-cgi/trace"
TIMELINE_VERSION = "2.18"

POSITIVE_WORDS = {'positive', 'bullish', 'trumpy', 'good'}
NEGATIVE_WORDS = {'negative', 'bearish', 'grumpy', 'bad'}
HIGH_IMPACT_WORDS = {'high', 'major', 'significant'}
MEDIUM_IMPACT_WORDS = {'medium', 'moderate'}

def normalize_sentiment(value: Optional[str]) -> str:
    if not value:
        return 'neutral'
    value = str(value).lower()
    if value in POSITIVE_WORDS:
        return 'positive'
    if value in NEGATIVE_WORDS:
        return 'negative'
    return 'neutral'

def normalize_impact(value: Optional[str]) -> str:
    if not value:
        return 'low'
    value = str(value).lower()
    if value in HIGH_IMPACT_WORDS:
        return 'high'
    if value in MEDIUM_IMPACT_WORDS:
        return 'medium'
    return 'low'

def normalize_confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.5
    return float(value)

def parse_trace(text: str) -> Dict[str, str]:
    """Parse key=value lines of a trace response"""
    data = {}
    for line in (text or "").splitlines():
        if '=' in line:
            key, value = line.split('=', 1)
            data[key.strip()] = value.strip()
    return data

def to_event(item: Dict[str, Any], symbol: str) -> Dict[str, Any]:
    """Convert a raw timeline item to an event record"""
    return {
        'id': str(item.get('id') or uuid.uuid4().hex[:13]),
        'symbol': symbol,
        'title': item.get('title') or item.get('headline') or '',
        'date': item.get('date') or item.get('timestamp') or time.strftime('%Y-%m-%d'),
        'timestamp': item.get('timestamp') or int(time.time()),
        'sentiment': normalize_sentiment(item.get('sentiment')),
        'impact_level': normalize_impact(item.get('impact')),
        'summary': item.get('summary') or item.get('description') or '',
        'content': item.get('content') or item.get('full_text') or '',
        'source': 'analysis',
        'confidence': normalize_confidence(item.get('confidence')),
        'sectors': item.get('sectors') or [],
        'affected_securities': item.get('affected_securities') or []
    }

def sentiment_summary(events: List[Dict[str, Any]]) -> Dict[str, float]:
    counts = Counter(e['sentiment'] for e in events)
    total = sum(counts[label] for label in ('positive', 'neutral', 'negative'))
    if not total:
        return {'positive': 0, 'neutral': 0, 'negative': 0}
    return {label: round(counts[label] / total * 100, 1) for label in ('positive', 'neutral', 'negative')}

def overall_sentiment(events: List[Dict[str, Any]]) -> str:
    """Majority sentiment, ties resolved in positive, negative, neutral order"""
    if not events:
        return 'neutral'
    counts = Counter(e.get('sentiment', 'neutral') for e in events)
    return max(('positive', 'negative', 'neutral'), key=lambda label: counts[label])

def sentiment_timeline(events: List[Dict[str, Any]]) -> Dict[str, Dict[str, int]]:
    timeline: Dict[str, Dict[str, int]] = {}
    for event in events:
        day = timeline.setdefault(str(event.get('date')), {'positive': 0, 'negative': 0, 'neutral': 0})
        day[event.get('sentiment', 'neutral')] += 1
    return timeline

def mean_confidence(events: List[Dict[str, Any]]) -> float:
    if not events:
        return 0.0
    return round(sum(normalize_confidence(e.get('confidence')) for e in events) / len(events), 2)

class AnalysisAdapter(ProviderAdapter):
    """
    External analysis backend
    Every content type is derived from the same timeline request
    """

    name = "analysis"
    supported_types = frozenset(ContentType)

    def __init__(self, transport: Transport, version: str = TIMELINE_VERSION):
        super().__init__(transport)
        self.version = version

    def _timeline(self, symbol: str, options: Dict[str, Any]):
        """Fetch and normalize the timeline; returns a list of events or an error response"""
        symbol = symbol.upper()
        result = self._fetch(TIMELINE_PATH.format(symbol=symbol), {
            'version': self.version,
            'source': 'default'
        })
        if not result.successful:
            logger.error(f"Analysis timeline for {symbol} returned {result.status_code}")
            return ContentResponse.error(
                self.name,
                f"Analysis request failed: {result.error_message}",
                status_code=result.status_code,
                error="Analysis failed",
                symbol=symbol,
                provider=self.name
            )

        timeline = result.json().get('timeline')
        items = timeline if isinstance(timeline, list) else []
        events = [to_event(item, symbol) for item in items if isinstance(item, dict)]

        limit = options.get('limit')
        return events[:int(limit)] if limit else events

    def get_analysis(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        events = self._timeline(symbol, options)
        if isinstance(events, ContentResponse):
            return events

        return ContentResponse.ok(self.name, {
            'symbol': symbol.upper(),
            'status': 'success',
            'events': events,
            'sentiment_summary': sentiment_summary(events),
            'total_events': len(events),
            'provider': self.name,
            'timestamp': int(time.time()),
            'timeframe': options.get('timeframe', '30d')
        })

    def get_news(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        events = self._timeline(symbol, options)
        if isinstance(events, ContentResponse):
            return events

        articles = [
            {
                'id': e['id'],
                'title': e['title'],
                'summary': e['summary'],
                'url': None,
                'source': self.name,
                'published_at': e['date'],
                'sentiment': e['sentiment']
            }
            for e in events
        ]
        return ContentResponse.ok(self.name, {
            'symbol': symbol.upper(),
            'provider': self.name,
            'articles': articles,
            'total': len(articles),
            'timestamp': int(time.time())
        })

    def get_sentiment(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        events = self._timeline(symbol, options)
        if isinstance(events, ContentResponse):
            return events

        return ContentResponse.ok(self.name, {
            'symbol': symbol.upper(),
            'overall_sentiment': overall_sentiment(events),
            'sentiment_distribution': sentiment_summary(events),
            'sentiment_timeline': sentiment_timeline(events),
            'confidence_score': mean_confidence(events),
            'provider': self.name,
            'timestamp': int(time.time())
        })

    def get_events(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        events = self._timeline(symbol, options)
        if isinstance(events, ContentResponse):
            return events

        major = [e for e in events if e.get('impact_level', 'low') != 'low']
        impact = {'low': 0, 'medium': 0, 'high': 0}
        for event in major:
            impact[event['impact_level']] += 1

        return ContentResponse.ok(self.name, {
            'symbol': symbol.upper(),
            'events': major,
            'total_events': len(major),
            'event_types': dict(Counter(detect_event_type(e) for e in major)),
            'impact_distribution': impact,
            'provider': self.name,
            'timestamp': int(time.time())
        })

    def get_trace(self) -> Dict[str, Any]:
        """Fetch the edge trace used as a liveness signal"""
        result = self._fetch(TRACE_PATH)
        trace = {'timestamp': int(time.time()), 'success': result.successful, 'cf_data': {}}
        if result.successful and isinstance(result.body, str):
            trace['cf_data'] = parse_trace(result.body)
        return trace

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            'provider': self.name,
            'supports': sorted(t.value for t in self.supported_types),
            'features': {
                'ai_analysis': True,
                'sentiment_analysis': True,
                'event_classification': True,
                'impact_assessment': True,
                'financial_timeline': True
            },
            'limits': {
                'requests_per_minute': 100,
                'max_symbols_per_request': 1,
                'max_timeline_days': 90
            }
        }

    def get_configuration(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'endpoints': {
                'trace': TRACE_PATH,
                'finance': TIMELINE_PATH.rsplit('/', 1)[0]
            },
            'default_options': {
                'version': self.version,
                'format': 'standard'
            },
            'authentication': 'session_based'
        }

    def is_healthy(self) -> bool:
        try:
            return self.get_trace()['success']
        except Exception as e:
            logger.error(f"Analysis health check failed: {e}")
            return False
