from django.urls import include, path

urlpatterns = [
    path('', include('finance_dashboard.urls')),
]
