from fxtrack.providers.news import NewsFeed
from fxtrack.providers.quotes import ExchangeRateApiProvider, QuoteProvider

__all__ = ["ExchangeRateApiProvider", "NewsFeed", "QuoteProvider"]
