"""
End-to-end runs that pull data from integrations and act on it.
"""
