from django.contrib import admin

from festivals.models import Festival, Performance, User


class PerformanceInline(admin.TabularInline):
    model = Performance
    fk_name = "festival"
    fields = ["name", "creator", "phase", "staff_assigned"]
    extra = 0


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ["username", "role", "account_status"]
    list_filter = ["role", "account_status"]
    search_fields = ["username"]
    exclude = ["password_hash"]


@admin.register(Festival)
class FestivalAdmin(admin.ModelAdmin):
    list_display = ["name", "venue", "phase", "created_at"]
    list_filter = ["phase"]
    search_fields = ["name", "venue"]
    inlines = [PerformanceInline]


@admin.register(Performance)
class PerformanceAdmin(admin.ModelAdmin):
    list_display = ["name", "festival", "creator", "phase", "staff_assigned"]
    list_filter = ["festival", "phase"]
    search_fields = ["name"]
