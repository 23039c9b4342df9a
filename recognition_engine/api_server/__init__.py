"""
API server package — HTTP trigger for results calculation and read access to results.
"""
