"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from webinar_access.adapters.signing_keys import SettingsSigningKeyProvider
from webinar_access.adapters.supabase_audit_repository import SupabaseAuditRepository
from webinar_access.adapters.supabase_group_directory import SupabaseGroupDirectory
from webinar_access.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from webinar_access.adapters.supabase_user_directory import SupabaseUserDirectory
from webinar_access.config import Settings
from webinar_access.services.admin import AdminService
from webinar_access.services.attendance import AttendanceService
from webinar_access.services.audit import AuditService
from webinar_access.services.cache import InMemoryCache
from webinar_access.services.directory import DirectoryService
from webinar_access.services.join import SessionJoinService
from webinar_access.services.locks import SessionLockRegistry
from webinar_access.services.roster import RosterService, RosterWriter
from webinar_access.services.tokens import AccessTokenIssuer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    roster_service: RosterService
    attendance_service: AttendanceService
    join_service: SessionJoinService
    admin_service: AdminService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    audit_repository = SupabaseAuditRepository(supabase_client)
    audit_service = AuditService(audit_repository)
    writer = RosterWriter(
        repository=session_repository,
        locks=SessionLockRegistry(),
        timeout_seconds=resolved_settings.store_timeout_seconds,
        conflict_retries=resolved_settings.roster_conflict_retries,
    )
    directory_service = DirectoryService(
        group_directory=SupabaseGroupDirectory(supabase_client),
        user_directory=SupabaseUserDirectory(supabase_client),
        cache=InMemoryCache(),
        group_ttl_seconds=resolved_settings.group_cache_ttl_seconds,
        timeout_seconds=resolved_settings.store_timeout_seconds,
    )
    token_issuer = AccessTokenIssuer(
        key_provider=SettingsSigningKeyProvider(resolved_settings),
        app_id=resolved_settings.conferencing_app_id,
        issuer=resolved_settings.conferencing_issuer,
        audience=resolved_settings.conferencing_audience,
    )
    join_service = SessionJoinService(
        writer=writer,
        directory=directory_service,
        token_issuer=token_issuer,
        audit_service=audit_service,
        default_buffer_minutes=resolved_settings.join_buffer_minutes,
        require_preregistration=resolved_settings.require_preregistration,
    )
    return AppContainer(
        settings=resolved_settings,
        roster_service=RosterService(writer=writer, audit_service=audit_service),
        attendance_service=AttendanceService(
            writer=writer, audit_service=audit_service
        ),
        join_service=join_service,
        admin_service=AdminService(admin_repository=audit_repository, writer=writer),
    )
