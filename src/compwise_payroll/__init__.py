"""CompWise payroll: monthly and annual salary breakdown calculator."""

__version__ = "1.0.0"
