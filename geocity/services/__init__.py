"""
Services layer - business logic for GEOCITY.

Routes stay thin and call into these modules:
- report_service / cleanup_service / expiration: report lifecycle
- map_service / icons: map markers
- ai_plugin / geocoding: best-effort enrichment of new reports
- discord_service / realtime / emergency_monitor: notifications
- user_service / auth_service: accounts and profiles
"""
