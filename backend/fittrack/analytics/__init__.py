"""
Pure analytics over tracker collections.

- weekly: Monday-start week buckets
- trend: least-squares slope and weekly rates
- forecast: goal projection from blended trends
- summary: sentiment-tagged comparison strings
- activity: dashboard/insight helpers built on the above
"""
