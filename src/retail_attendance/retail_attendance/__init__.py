"""Retail attendance package.

Organized by feature modules (attendance, penalty, payroll) with a thin Flask
controller layer over service/repository layers. The attendance state machine,
the smart auto-checkout reconciliation and the penalty engine live here.
"""
