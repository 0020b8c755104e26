from django.contrib import admin

from .models import ContentItem, Course, Section


class SectionInline(admin.StackedInline):
    model = Section
    extra = 1
    ordering = ("order",)
    fields = ("title", "description", "order")


class ContentItemInline(admin.TabularInline):
    model = ContentItem
    extra = 1
    ordering = ("order",)
    fields = ("title", "content_type", "order", "drip_delay_days")


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "slug",
        "instructor",
        "status",
        "drip_enabled",
        "certificate_enabled",
        "section_count",
        "created_at",
    )
    list_filter = ("status", "drip_enabled", "certificate_enabled", "instructor")
    search_fields = ("title", "slug", "description", "instructor__email")
    prepopulated_fields = {"slug": ("title",)}
    list_select_related = ("instructor",)
    inlines = [SectionInline]
    fieldsets = (
        (None, {"fields": ("title", "slug", "instructor", "status")}),
        ("Details", {"fields": ("description",)}),
        (
            "Drip & Certification",
            {
                "fields": (
                    "drip_enabled",
                    "drip_schedule_type",
                    "drip_release_day",
                    "certificate_enabled",
                )
            },
        ),
    )

    def section_count(self, obj):
        return obj.sections.count()

    section_count.short_description = "Sections"


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "order", "content_item_count", "created_at")
    list_filter = ("course",)
    search_fields = ("title", "description", "course__title")
    list_select_related = ("course",)
    inlines = [ContentItemInline]

    def content_item_count(self, obj):
        return obj.content_items.count()

    content_item_count.short_description = "Items"


@admin.register(ContentItem)
class ContentItemAdmin(admin.ModelAdmin):
    list_display = ("title", "section", "content_type", "order", "drip_delay_days")
    list_filter = ("content_type", "section__course")
    search_fields = ("title", "section__title", "section__course__title")
    list_select_related = ("section", "section__course")
