from django.urls import path
from finance_dashboard import views

app_name = 'finance_dashboard'

urlpatterns = [
    path('api/sync/<str:target>/', views.api_sync, name='api_sync'),
    path('api/payables/', views.api_payables, name='api_payables'),
    path('api/receivables/', views.api_receivables, name='api_receivables'),
    path('api/cash-flow/', views.api_cash_flow, name='api_cash_flow'),
    path('api/reports/', views.api_reports, name='api_reports'),
]
