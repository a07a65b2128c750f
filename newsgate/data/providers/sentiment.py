"""
Social sentiment provider
Reads the social mood feed and turns raw posts into sentiment metrics
"""

import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ...utils import get_logger
from ..base import ContentResponse, ContentType, ProviderAdapter
from ..transport import Transport

logger = get_logger(__name__)

STANDARD_LABELS = ('positive', 'neutral', 'negative')

DEFAULT_BUCKETS = {
    'positive': 'trumpy',
    'neutral': 'neutral',
    'negative': 'grumpy'
}

# Market mood words accepted wherever a sentiment label is
LABEL_ALIASES = {
    'bullish': 'positive',
    'bearish': 'negative'
}

MOOD_FILTERS = {
    'positive': 'bullish',
    'negative': 'bearish',
    'neutral': 'neutral'
}

BULLISH_THRESHOLD = 0.6
BEARISH_THRESHOLD = 0.4

TIMEFRAME_PAGES = {
    '1h': 1,
    '1d': 2,
    '7d': 10,
    '30d': 30
}
DEFAULT_ESTIMATED_PAGES = 5

MAX_PAGE_SIZE = 100

class SentimentTaxonomy:
    """
    Bidirectional mapping between the standard sentiment vocabulary
    and the backend's three bucket labels
    """

    def __init__(self, buckets: Optional[Mapping[str, str]] = None):
        buckets = {k.lower(): v for k, v in (buckets or DEFAULT_BUCKETS).items()}
        if set(buckets) != set(STANDARD_LABELS):
            raise ValueError(f"Sentiment buckets must map exactly {STANDARD_LABELS}, got {sorted(buckets)}")
        if len({v.lower() for v in buckets.values()}) != len(buckets):
            raise ValueError("Sentiment bucket labels must be distinct")

        self._to_internal = dict(buckets)
        self._to_standard = {v.lower(): k for k, v in buckets.items()}

    @property
    def positive(self) -> str:
        return self._to_internal['positive']

    @property
    def neutral(self) -> str:
        return self._to_internal['neutral']

    @property
    def negative(self) -> str:
        return self._to_internal['negative']

    @property
    def buckets(self) -> Dict[str, str]:
        return dict(self._to_internal)

    def to_internal(self, label: str) -> str:
        """Map a standard label (or bullish/bearish) to its bucket, unknown labels pass through"""
        lowered = str(label).lower()
        standard = LABEL_ALIASES.get(lowered, lowered)
        if standard in self._to_internal:
            return self._to_internal[standard]
        return label

    def to_standard(self, bucket: Optional[str]) -> str:
        """Map a bucket label back to the standard vocabulary"""
        if bucket is None:
            return 'neutral'
        return self._to_standard.get(str(bucket).lower(), 'neutral')

    def map_filters(self, labels) -> List[str]:
        """Translate a sentiment filter (string or list) to unique bucket labels"""
        if isinstance(labels, str):
            labels = [labels]

        mapped = []
        for label in labels:
            bucket = self.to_internal(label)
            if bucket not in mapped:
                mapped.append(bucket)
        return mapped

@dataclass(frozen=True)
class SentimentPost:
    """A single social post as read from the feed"""
    id: str
    summary: str
    content: str
    bucket: str
    sentiment: str
    timestamp: Any
    sectors: Tuple[str, ...] = field(default_factory=tuple)
    affected_securities: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], taxonomy: SentimentTaxonomy) -> 'SentimentPost':
        sentiment = raw.get('sentiment')
        if isinstance(sentiment, Mapping):
            bucket = sentiment.get('name')
        else:
            bucket = sentiment
        bucket = str(bucket or taxonomy.neutral).lower()

        sectors = tuple(dict.fromkeys(raw.get('sectors') or []))
        securities = tuple(
            s if isinstance(s, Mapping) else {'ticker': str(s)}
            for s in (raw.get('affected_securities') or [])
        )

        return cls(
            id=str(raw.get('id') or uuid.uuid4().hex[:13]),
            summary=raw.get('summary') or '',
            content=raw.get('content') or '',
            bucket=bucket,
            sentiment=taxonomy.to_standard(bucket),
            timestamp=raw.get('timestamp') or raw.get('time') or int(time.time()),
            sectors=sectors,
            affected_securities=securities
        )

    @property
    def text(self) -> str:
        return self.content or self.summary

    @property
    def is_polar(self) -> bool:
        return self.sentiment != 'neutral'

    @property
    def tickers(self) -> List[str]:
        return [s.get('ticker') for s in self.affected_securities if s.get('ticker')]

# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def interpret_mood_index(mood_index: float) -> str:
    """bullish at or above 0.6, bearish at or below 0.4, neutral in between"""
    if mood_index >= BULLISH_THRESHOLD:
        return 'bullish'
    if mood_index <= BEARISH_THRESHOLD:
        return 'bearish'
    return 'neutral'

def sentiment_distribution(posts: Sequence[SentimentPost]) -> Dict[str, float]:
    """Share of posts per sentiment, in percent rounded to one decimal"""
    counts = Counter(post.sentiment for post in posts)
    total = sum(counts[label] for label in STANDARD_LABELS)

    if total == 0:
        return {label: 0.0 for label in STANDARD_LABELS}
    return {label: round(counts[label] / total * 100, 1) for label in STANDARD_LABELS}

def sentiment_confidence(mood_index: float) -> float:
    """Confidence grows as the mood index moves away from 0.5"""
    return min(0.5 + abs(mood_index - 0.5) * 2, 1.0)

def sentiment_volatility(posts: Sequence[SentimentPost]) -> str:
    unique = len({post.sentiment for post in posts})
    if unique >= 3:
        return 'high'
    if unique == 2:
        return 'medium'
    return 'low'

def order_newest_first(posts: Sequence[SentimentPost]) -> List[SentimentPost]:
    """Sort by numeric timestamp when every post has one, otherwise keep feed order"""
    if posts and all(isinstance(p.timestamp, (int, float)) for p in posts):
        return sorted(posts, key=lambda p: p.timestamp, reverse=True)
    return list(posts)

def count_by_sentiment(posts: Iterable[SentimentPost], label: str) -> int:
    return sum(1 for post in posts if post.sentiment == label)

def trending_direction(posts: Sequence[SentimentPost], window: int = 5) -> str:
    """Compare positive posts among the newest and the oldest in the sample"""
    ordered = order_newest_first(posts)
    recent = count_by_sentiment(ordered[:window], 'positive')
    older = count_by_sentiment(ordered[-window:], 'positive')

    if recent > older:
        return 'improving'
    if recent < older:
        return 'declining'
    return 'stable'

def post_significance(post: SentimentPost) -> float:
    significance = 0.5 if post.is_polar else 0.0
    significance += len(post.affected_securities) * 0.1
    significance += len(post.sectors) * 0.05
    if len(post.text) > 100:
        significance += 0.2
    return significance

def key_posts(posts: Sequence[SentimentPost], limit: int = 3) -> List[SentimentPost]:
    """Top posts by significance, highest first"""
    return sorted(posts, key=post_significance, reverse=True)[:limit]

def engagement_score(post: SentimentPost) -> float:
    score = 0.5
    if len(post.text) > 200:
        score += 0.2
    if post.affected_securities:
        score += 0.1
    if post.sectors:
        score += 0.1
    return min(score, 1.0)

def virality_score(post: SentimentPost) -> float:
    score = 0.3
    score += len(post.affected_securities) * 0.1
    score += len(post.sectors) * 0.05
    return min(score, 1.0)

def is_significant_social_event(post: SentimentPost) -> bool:
    """Polar sentiment that reaches several securities or sectors"""
    return post.is_polar and (len(post.affected_securities) > 2 or len(post.sectors) > 1)

def social_impact(post: SentimentPost) -> str:
    score = 2 if post.is_polar else 0

    securities = len(post.affected_securities)
    if securities > 3:
        score += 2
    elif securities > 1:
        score += 1

    if len(post.sectors) > 2:
        score += 1

    if score >= 4:
        return 'high'
    if score >= 2:
        return 'medium'
    return 'low'

def estimate_pages(timeframe: str) -> int:
    return TIMEFRAME_PAGES.get(timeframe, DEFAULT_ESTIMATED_PAGES)

def trending_topics(posts: Sequence[SentimentPost], limit: int = 5) -> Dict[str, int]:
    """Most mentioned sectors"""
    counts = Counter(sector for post in posts for sector in post.sectors)
    return dict(counts.most_common(limit))

def average_content_length(posts: Sequence[SentimentPost]) -> int:
    if not posts:
        return 0
    return int(sum(len(post.text) for post in posts) / len(posts))

def engagement_metrics(posts: Sequence[SentimentPost]) -> Dict[str, Any]:
    total = len(posts)
    with_sectors = sum(1 for post in posts if post.sectors)
    with_securities = sum(1 for post in posts if post.affected_securities)

    return {
        'sector_mention_rate': round(with_sectors / total * 100, 1) if total else 0,
        'security_mention_rate': round(with_securities / total * 100, 1) if total else 0,
        'avg_content_length': average_content_length(posts)
    }

def influencer_mentions(posts: Sequence[SentimentPost], keywords: Iterable[str]) -> Dict[str, int]:
    mentions: Dict[str, int] = {}
    for post in posts:
        text = post.text.lower()
        for keyword in keywords:
            if keyword.lower() in text:
                mentions[keyword] = mentions.get(keyword, 0) + 1
    return mentions

def format_post(post: SentimentPost) -> Dict[str, Any]:
    return {
        'id': post.id,
        'summary': post.summary,
        'sentiment': post.sentiment,
        'timestamp': post.timestamp,
        'sectors': list(post.sectors),
        'securities': post.tickers
    }

# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------

class SentimentAdapter(ProviderAdapter):
    """
    Social media sentiment provider
    Serves sentiment, analysis and post streams; social "events" are
    available through get_events but not advertised for routing
    """

    name = "sentiment"
    supported_types = frozenset({ContentType.SENTIMENT, ContentType.NEWS, ContentType.ANALYSIS})

    def __init__(
        self,
        transport: Transport,
        taxonomy: Optional[SentimentTaxonomy] = None,
        feed_path: str = "/api/news/trump-effect",
        influencer_keywords: Iterable[str] = ("trump",),
        key_posts_limit: int = 3
    ):
        super().__init__(transport)
        self.taxonomy = taxonomy or SentimentTaxonomy()
        self.feed_path = feed_path
        self.influencer_keywords = tuple(influencer_keywords)
        self.key_posts_limit = key_posts_limit

    def _build_params(self, options: Dict[str, Any], default_limit: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            'pageSize': min(int(options.get('limit') or default_limit), MAX_PAGE_SIZE)
        }

        sentiment = options.get('sentiment')
        if sentiment:
            params['sentiment'] = self.taxonomy.map_filters(sentiment)

        mood = options.get('mood')
        if mood:
            params['mood'] = MOOD_FILTERS.get(str(mood).lower(), mood)

        return params

    def _read_feed(self, symbol: str, params: Dict[str, Any]):
        """Fetch the feed; returns (posts, mood_index, feed) or an error response"""
        result = self._fetch(self.feed_path, params)
        if not result.successful:
            logger.error(f"Sentiment feed returned {result.status_code} for {symbol}")
            return ContentResponse.from_transport_failure(self.name, result, symbol)

        feed = result.json().get('data')
        if not isinstance(feed, Mapping):
            logger.error(f"Sentiment feed payload missing 'data' for {symbol}")
            return ContentResponse.error(
                self.name,
                "Malformed sentiment feed",
                status_code=502,
                error="Provider request failed",
                symbol=symbol
            )

        posts = [SentimentPost.from_raw(raw, self.taxonomy) for raw in feed.get('posts') or []]
        mood_index = float(feed.get('mood_index', 0.5))
        return posts, mood_index, feed

    def get_sentiment(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        params = self._build_params(options, default_limit=20)

        timeframe = options.get('timeframe', '1d')
        if timeframe != '1d':
            params.update({'page': 1, 'estimated_pages': estimate_pages(timeframe)})

        feed = self._read_feed(symbol, params)
        if isinstance(feed, ContentResponse):
            return feed
        posts, mood_index, _ = feed

        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'overall_sentiment': interpret_mood_index(mood_index),
            'mood_index': mood_index,
            'sentiment_metrics': {
                'distribution': sentiment_distribution(posts),
                'confidence': sentiment_confidence(mood_index),
                'volatility': sentiment_volatility(posts),
                'trending_direction': trending_direction(posts)
            },
            'post_analysis': {
                'total_posts': len(posts),
                'positive_posts': count_by_sentiment(posts, 'positive'),
                'negative_posts': count_by_sentiment(posts, 'negative'),
                'neutral_posts': count_by_sentiment(posts, 'neutral')
            },
            'key_posts': [
                {**format_post(p), 'content': p.content, 'significance': round(post_significance(p), 2)}
                for p in key_posts(posts, self.key_posts_limit)
            ],
            'timestamp': int(time.time())
        })

    def get_news(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        # News from a social source means the posts themselves
        options = options or {}
        feed = self._read_feed(symbol, self._build_params(options, default_limit=20))
        if isinstance(feed, ContentResponse):
            return feed
        posts, mood_index, _ = feed

        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'posts': [format_post(p) for p in posts],
            'total': len(posts),
            'mood_index': mood_index,
            'timestamp': int(time.time())
        })

    def get_analysis(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        options = options or {}
        params = self._build_params(options, default_limit=50)
        params['page'] = options.get('page', 1)

        feed = self._read_feed(symbol, params)
        if isinstance(feed, ContentResponse):
            return feed
        posts, mood_index, raw_feed = feed

        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'sentiment_analysis': {
                'mood_index': mood_index,
                'mood_interpretation': interpret_mood_index(mood_index),
                'total_posts': len(posts),
                'sentiment_distribution': sentiment_distribution(posts),
                'trending_topics': trending_topics(posts),
                'engagement_metrics': engagement_metrics(posts),
                'influencer_mentions': influencer_mentions(posts, self.influencer_keywords)
            },
            'posts': [format_post(p) for p in posts[:10]],
            'pagination': raw_feed.get('pagination'),
            'timestamp': int(time.time())
        })

    def get_events(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        # Social events are polar posts that spread across securities or sectors
        options = dict(options or {})
        options['sentiment'] = ['positive', 'negative']
        options.setdefault('limit', 50)
        params = self._build_params(options, default_limit=50)
        params['page'] = options.get('page', 1)

        feed = self._read_feed(symbol, params)
        if isinstance(feed, ContentResponse):
            return feed
        posts, _, _ = feed

        events = [
            {
                'id': post.id,
                'type': 'social_viral',
                'title': 'Viral Social Media Post',
                'description': post.summary or post.content,
                'sentiment': post.sentiment,
                'impact_level': social_impact(post),
                'timestamp': post.timestamp,
                'source': self.name,
                'engagement_score': engagement_score(post),
                'virality_score': virality_score(post)
            }
            for post in posts if is_significant_social_event(post)
        ]

        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'events': events,
            'total_events': len(events),
            'event_types': ['social_viral', 'sentiment_spike'],
            'timestamp': int(time.time())
        })

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            'provider': self.name,
            'supports': sorted(t.value for t in self.supported_types),
            'features': {
                'social_sentiment_analysis': True,
                'mood_index_tracking': True,
                'influencer_impact': True,
                'viral_content_detection': True,
                'pagination': True,
                'sentiment_filtering': True,
                'mood_filtering': True
            },
            'limits': {
                'requests_per_minute': 500,
                'max_page_size': MAX_PAGE_SIZE,
                'historical_data_days': 30
            },
            'sentiment_types': {
                'positive': 'Bullish social sentiment',
                'neutral': 'Neutral social sentiment',
                'negative': 'Bearish social sentiment'
            },
            'mood_types': {
                'bullish': f"Mood index >= {BULLISH_THRESHOLD}",
                'bearish': f"Mood index <= {BEARISH_THRESHOLD}",
                'neutral': f"Mood index {BEARISH_THRESHOLD}-{BULLISH_THRESHOLD}"
            }
        }

    def get_configuration(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'base_endpoint': self.feed_path,
            'default_options': {
                'page_size': 20,
                'mood_mapping': dict(MOOD_FILTERS)
            },
            'authentication': 'api_key_required'
        }

    def is_healthy(self) -> bool:
        try:
            result = self._fetch(self.feed_path, {'pageSize': 1})
            return result.status_code < 500
        except Exception as e:
            logger.error(f"Sentiment health check failed: {e}")
            return False
