from django.urls import path

from .views import CoursePreviewView

app_name = "courses"

urlpatterns = [
    path("<uuid:course_id>/preview/", CoursePreviewView.as_view(), name="course-preview"),
]
