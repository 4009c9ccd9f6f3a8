"""
Helpdesk ticket lifecycle and query engine
"""
