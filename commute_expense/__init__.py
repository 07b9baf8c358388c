"""
Commute Expense Reimbursement

Submission and approval workflow for commuting costs.
"""

__version__ = "1.0.0"
