"""Analysis engines: indicators, patterns, trend, market structure and prediction."""
