from django.apps import AppConfig


class FinanceDashboardConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'finance_dashboard'
    verbose_name = 'Finance Dashboard'
