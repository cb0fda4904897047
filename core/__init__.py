"""
Core technical context analysis modules.

Provides unified interfaces for:
- Data access (Yahoo Finance or cached CSV bars)
- Indicator calculations (MA, EMA, RSI, MACD, ATR)
- Context classification, alignment scoring and insights
- Signal hypothesis tests and retrospective setup matching
"""
