"""
Payroll Kernel

The payroll ledger and approval-state core of the operations portal:
- Daily order submissions with an approval state machine
- Warnings that cascade into salary deductions
- Monthly salary computation in exact decimals
- Idempotent attendance marks
"""

__version__ = "0.1.0"
