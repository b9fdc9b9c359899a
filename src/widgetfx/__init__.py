"""
WidgetFX - Currency Converter with a Dormant Widget Surface

A currency converter whose foreground session fetches rates from several
unreliable providers and shares the last known good conversion with a
periodically regenerated widget through a file-backed snapshot store.
"""

__version__ = "1.0.0"
