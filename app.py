"""Entry point for `flask run` and `flask dtr check-orphaned`.

Flask discovers the ``create_app`` factory from this module.
"""

from src.dtr_payroll.dtr_payroll.main import create_app

if __name__ == "__main__":
    create_app().run()
