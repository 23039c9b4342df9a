"""
Recognition Results Engine — vote aggregation, weighted ranking, and fairness analysis.

Turns the peer votes of a recognition cycle into published theme results.
Modular layout: pure analysis engine, SQLAlchemy persistence, a batch
results worker, and a FastAPI trigger endpoint.
"""

__version__ = "0.1.0"
