from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CertificateVerifyView, CertificateViewSet, EnrollmentViewSet

app_name = "enrollments"

router = DefaultRouter()
router.register(r"enrollments", EnrollmentViewSet, basename="enrollment")
router.register(r"certificates", CertificateViewSet, basename="certificate")

urlpatterns = [
    # Public certificate verification
    path(
        "certificates/verify/<str:certificate_number>/",
        CertificateVerifyView.as_view(),
        name="certificate-verify",
    ),
    path("", include(router.urls)),
]
