"""DTR Payroll package.

This package is organized by feature modules (time_records, payroll,
settlement, integrity, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
