from datetime import datetime


def generar_folio_cita(fecha=None):
    """Human readable appointment reference: CITA-YYYYMMDD-HHMMSS (local clock)."""
    fecha = fecha or datetime.now()
    return f"CITA-{fecha.strftime('%Y%m%d')}-{fecha.strftime('%H%M%S')}"
