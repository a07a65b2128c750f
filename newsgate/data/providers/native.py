"""
Native news provider
First party news, company analysis and social feed endpoints
Includes headline sentiment scoring using VADER
"""

import time
import uuid
from typing import Any, Dict, List, Optional
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from ...utils import get_logger
from ..base import ContentResponse, ContentType, ProviderAdapter, timeframe_to_days
from ..transport import Transport, TransportResult

logger = get_logger(__name__)

EVENT_KEYWORDS = ('earnings', 'dividend', 'split', 'merger', 'acquisition', 'announcement', 'launch')
HIGH_IMPACT_KEYWORDS = ('earnings', 'merger', 'acquisition', 'bankruptcy')
MEDIUM_IMPACT_KEYWORDS = ('dividend', 'split', 'partnership')
DEFAULT_EVENT_TYPES = ('earnings', 'announcements', 'splits', 'dividends')

# VADER compound thresholds
POSITIVE_COMPOUND = 0.05
NEGATIVE_COMPOUND = -0.05

def label_compound(compound: float) -> str:
    if compound >= POSITIVE_COMPOUND:
        return 'positive'
    if compound <= NEGATIVE_COMPOUND:
        return 'negative'
    return 'neutral'

def _item_text(item: Dict[str, Any]) -> str:
    parts = [item.get(k) for k in ('title', 'headline', 'summary', 'content')]
    return " ".join(p for p in parts if isinstance(p, str)).lower()

def is_event(item: Dict[str, Any]) -> bool:
    """A news item counts as an event when it mentions a corporate action"""
    text = _item_text(item)
    return any(keyword in text for keyword in EVENT_KEYWORDS)

def detect_event_type(item: Dict[str, Any]) -> str:
    text = _item_text(item)
    if 'earnings' in text:
        return 'earnings'
    if 'dividend' in text:
        return 'dividend'
    if 'split' in text:
        return 'split'
    if 'merger' in text or 'acquisition' in text:
        return 'merger'
    if 'announcement' in text:
        return 'announcement'
    return 'news'

def impact_level(item: Dict[str, Any]) -> str:
    text = _item_text(item)
    if any(keyword in text for keyword in HIGH_IMPACT_KEYWORDS):
        return 'high'
    if any(keyword in text for keyword in MEDIUM_IMPACT_KEYWORDS):
        return 'medium'
    return 'low'

def extract_items(body: Any) -> List[Dict[str, Any]]:
    """Pull the list of news items out of a backend body"""
    if isinstance(body, list):
        items = body
    elif isinstance(body, dict):
        items = body.get('data', body.get('articles', []))
    else:
        items = []
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []

class NativeAdapter(ProviderAdapter):
    """
    First party provider
    Serves every content type; events come from a dedicated endpoint when
    the backend exposes one, otherwise news items are classified locally
    """

    name = "native"
    supported_types = frozenset(ContentType)

    def __init__(self, transport: Transport, feed_path: str = "/api/news/trump-effect"):
        super().__init__(transport)
        self.feed_path = feed_path
        self.sentiment_analyzer = SentimentIntensityAnalyzer()
        self._events_endpoint_available: Optional[bool] = None

    def _normalize_article(self, item: Dict[str, Any]) -> Dict[str, Any]:
        title = item.get('title') or item.get('headline') or ''
        summary = item.get('summary') or item.get('description') or ''

        # Combine title and summary for sentiment
        text = f"{title} {summary}".strip()
        compound = self.sentiment_analyzer.polarity_scores(text)['compound'] if text else 0.0

        source = item.get('source')
        if isinstance(source, dict):
            source = source.get('name')

        return {
            'id': str(item.get('id') or uuid.uuid4().hex[:13]),
            'title': title,
            'summary': summary,
            'url': item.get('url'),
            'source': source or self.name,
            'published_at': item.get('published_at') or item.get('publishedAt') or item.get('date'),
            'sentiment_score': compound,
            'sentiment': label_compound(compound)
        }

    def get_news(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        result = self._fetch('/api/news', {'ticker': symbol, 'limit': options.get('limit')})
        if not result.successful:
            logger.error(f"Native news request for {symbol} returned {result.status_code}")
            return ContentResponse.from_transport_failure(self.name, result, symbol)

        articles = [self._normalize_article(item) for item in extract_items(result.body)]
        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'articles': articles,
            'total': len(articles),
            'timestamp': int(time.time())
        }, status_code=result.status_code)

    def get_analysis(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        timeframe = options.get('timeframe', '30d')

        if options.get('use_news_analysis'):
            path = '/api/news/analysis'
            params = {
                'ticker': symbol,
                'days': timeframe_to_days(timeframe),
                'type': options.get('analysis_type', 'comprehensive')
            }
        else:
            path = '/api/companyAnalysis'
            params = {'ticker': symbol}

        result = self._fetch(path, params)
        if not result.successful:
            logger.error(f"Native analysis request for {symbol} returned {result.status_code}")
            return ContentResponse.from_transport_failure(self.name, result, symbol)

        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'analysis': result.body,
            'timestamp': int(time.time())
        }, status_code=result.status_code)

    def get_sentiment(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        params: Dict[str, Any] = {'pageSize': options.get('limit', 20)}

        sentiment = options.get('sentiment')
        if sentiment:
            params['sentiment'] = sentiment if isinstance(sentiment, list) else [sentiment]
        if options.get('mood'):
            params['mood'] = options['mood']

        result = self._fetch(self.feed_path, params)
        if not result.successful:
            logger.error(f"Native sentiment request for {symbol} returned {result.status_code}")
            return ContentResponse.from_transport_failure(self.name, result, symbol)

        feed = result.json().get('data') or {}
        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'mood_index': feed.get('mood_index'),
            'posts': feed.get('posts', []),
            'pagination': feed.get('pagination'),
            'timestamp': int(time.time())
        }, status_code=result.status_code)

    def events_endpoint_available(self) -> bool:
        """Probe the events endpoint once, transient failures are not remembered"""
        if self._events_endpoint_available is not None:
            return self._events_endpoint_available

        try:
            result = self._fetch('/api/news/analysis', {'ticker': 'TEST', 'type': 'events', 'limit': 1})
        except Exception as e:
            logger.warning(f"Events endpoint probe failed: {e}")
            return False

        if result.status_code >= 500:
            return False

        self._events_endpoint_available = result.status_code != 404
        logger.debug(f"Events endpoint available: {self._events_endpoint_available}")
        return self._events_endpoint_available

    def get_events(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        event_types = list(options.get('event_types', DEFAULT_EVENT_TYPES))
        timeframe = options.get('timeframe', '30d')

        if self.events_endpoint_available():
            result = self._fetch('/api/news/analysis', {
                'ticker': symbol,
                'type': 'events',
                'event_types': event_types,
                'days': timeframe_to_days(timeframe),
                'filter': 'major'
            })
            if not result.successful:
                logger.error(f"Native events request for {symbol} returned {result.status_code}")
                return ContentResponse.from_transport_failure(self.name, result, symbol)

            events = result.json().get('events')
            if events is None:
                events = extract_items(result.body)
            return self._events_response(symbol, events, result)

        # Classify plain news items instead
        result = self._fetch('/api/news', {'ticker': symbol, 'limit': options.get('limit')})
        if not result.successful:
            logger.error(f"Native news request for {symbol} returned {result.status_code}")
            return ContentResponse.from_transport_failure(self.name, result, symbol)

        events = [
            {
                'id': str(item.get('id') or uuid.uuid4().hex[:13]),
                'symbol': symbol,
                'title': item.get('title') or item.get('headline') or '',
                'type': detect_event_type(item),
                'date': item.get('date') or item.get('published_at') or time.strftime('%Y-%m-%d'),
                'impact_level': impact_level(item),
                'description': item.get('summary') or item.get('content') or '',
                'source': self.name
            }
            for item in extract_items(result.body) if is_event(item)
        ]
        return self._events_response(symbol, events, result)

    def _events_response(self, symbol: str, events: List[Dict[str, Any]], result: TransportResult) -> ContentResponse:
        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'events': events,
            'total': len(events),
            'timestamp': int(time.time())
        }, status_code=result.status_code)

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            'provider': self.name,
            'supports': sorted(t.value for t in self.supported_types),
            'features': {
                'real_time_news': True,
                'company_analysis': True,
                'social_sentiment': True,
                'event_detection': True,
                'headline_sentiment': True,
                'pagination': True,
                'filtering': True
            },
            'limits': {
                'requests_per_minute': 1000,
                'max_page_size': 100,
                'max_timeframe_days': 365
            }
        }

    def get_configuration(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'base_endpoints': {
                'news': '/api/news',
                'analysis': '/api/companyAnalysis',
                'sentiment': self.feed_path,
                'events': '/api/news/analysis'
            },
            'default_options': {
                'page_size': 20,
                'timeframe': '30d'
            },
            'authentication': 'api_key_required'
        }

    def is_healthy(self) -> bool:
        try:
            result = self._fetch('/api/news', {'ticker': 'AAPL', 'limit': 1})
            return result.status_code < 500
        except Exception as e:
            logger.error(f"Native health check failed: {e}")
            return False
