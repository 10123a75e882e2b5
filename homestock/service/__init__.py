from homestock.service.price_stats import get_price_stats

__all__ = ["get_price_stats"]
