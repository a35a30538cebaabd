from django.urls import path

from .views import MyCertificateView, VerifyCertificateView

app_name = 'certificates'

urlpatterns = [
    path('mine/', MyCertificateView.as_view(), name='mine'),
    path('verify/<str:code>/', VerifyCertificateView.as_view(), name='verify'),
]
