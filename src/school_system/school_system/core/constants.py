"""Constants and defaults.

Note: Keep constants here to avoid magic strings spread across code.
"""

CLOSE_PHRASE_TEMPLATE = "CERRAR AÑO {year}"
RESTORE_PHRASE_TEMPLATE = "RESTAURAR {year}"

DEFAULT_LOCK_TTL_MINUTES = 30
DEFAULT_HISTORY_LIMIT = 10

# Archive namespace kinds
ARCHIVE_STUDENTS = "students"
ARCHIVE_WORKSHOPS = "workshops"
ARCHIVE_ATTENDANCE = "attendance"

ACTION_RERUN = "Vuelva a ejecutar el cierre para continuar"
ACTION_CONTACT_ADMIN = "Contacte al administrador del sistema"
