"""
Reportes por rango de fechas y su exportación a Excel / CSV.

Cada reporte tiene una versión JSON (servicio del módulo) y una tabla
con encabezados en español para los archivos descargables.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import ValidationException
from hah_erp.services import (
    export_service,
    home_care_service,
    medical_record_service,
    procedure_service,
    shift_service,
)

REPORT_KINDS = ("procedures", "home-care", "shifts", "medical-appointments")


@dataclass
class ReportTable:
    title: str
    filename: str
    headers: list[str]
    rows: list[list[Any]]
    summary: dict[str, Any]


def check_range(date_from: date, date_to: date) -> None:
    if date_to < date_from:
        raise ValidationException("La fecha final no puede ser anterior a la inicial")


async def procedures_table(db: AsyncSession, date_from: date, date_to: date) -> ReportTable:
    report = await procedure_service.build_report(db, date_from, date_to)
    return ReportTable(
        title="Procedimientos",
        filename=f"reporte_procedimientos_{date_from}_{date_to}",
        headers=[
            "Fecha", "Paciente", "Procedimiento", "Cantidad", "Distrito", "Método de pago",
            "N° Operación", "Ingreso", "Gasto materiales", "Combustible", "Costo", "Utilidad",
        ],
        rows=[
            [
                r.record_date, r.patient_name, r.procedure_name, r.quantity, r.district,
                r.payment_method, r.operation_number, r.income, r.material_expenses,
                r.fuel, r.cost, r.utility,
            ]
            for r in report.rows
        ],
        summary={
            "Desde": date_from,
            "Hasta": date_to,
            "Total registros": report.totals.total_records,
            "Ingresos": report.totals.income,
            "Materiales": report.totals.materials,
            "Movilidad": report.totals.mobility,
            "Costo total": report.totals.cost,
            "Utilidad": report.totals.utility,
        },
    )


async def home_care_table(db: AsyncSession, date_from: date, date_to: date) -> ReportTable:
    report = await home_care_service.build_report(db, date_from, date_to)
    return ReportTable(
        title="Cuidados en casa",
        filename=f"reporte_cuidados_casa_{date_from}_{date_to}",
        headers=["Fecha de pago", "Paciente", "Turno", "Desde", "Hasta", "Monto", "Método de pago"],
        rows=[
            [r.paid_at, r.patient_name, r.shift, r.date_from, r.date_to, r.total_amount, r.payment_method]
            for r in report.rows
        ],
        summary={
            "Desde": date_from,
            "Hasta": date_to,
            "Ingresos": report.totals.total_revenue,
            "Periodos": report.totals.total_periods,
            "Promedio": report.totals.average,
        },
    )


async def shifts_table(db: AsyncSession, date_from: date, date_to: date) -> ReportTable:
    report = await shift_service.build_report(db, date_from, date_to)
    return ReportTable(
        title="Turnos",
        filename=f"reporte_turnos_{date_from}_{date_to}",
        headers=[
            "Fecha", "Hora", "Paciente", "Distrito", "Turno", "Enfermera(o)", "Monto",
            "Método de pago", "Gastos extra", "Utilidad",
        ],
        rows=[
            [
                r.shift_date, r.start_time, r.patient_name, r.district, r.shift, r.nurse,
                r.amount_due, r.payment_method, r.extra_expenses, r.utility,
            ]
            for r in report.rows
        ],
        summary={
            "Desde": date_from,
            "Hasta": date_to,
            "Ingresos": report.totals.total_revenue,
            "Turnos": report.totals.total_shifts,
            "Promedio": report.totals.average,
        },
    )


async def medical_appointments_table(db: AsyncSession, date_from: date, date_to: date) -> ReportTable:
    report = await medical_record_service.build_report(db, date_from, date_to)
    return ReportTable(
        title="Citas médicas",
        filename=f"reporte_citas_medicas_{date_from}_{date_to}",
        headers=["Fecha", "Paciente", "Tipo de cita", "Médico", "Ingreso", "Costo", "Utilidad"],
        rows=[
            [
                r.record_date, r.patient_name, r.appointment_type, r.doctor_name,
                r.income, r.cost, r.utility,
            ]
            for r in report.rows
        ],
        summary={
            "Desde": date_from,
            "Hasta": date_to,
            "Total registros": report.totals.total_records,
            "Ingresos": report.totals.total_income,
            "Costos": report.totals.total_cost,
            "Utilidad": report.totals.total_utility,
        },
    )


_BUILDERS = {
    "procedures": procedures_table,
    "home-care": home_care_table,
    "shifts": shifts_table,
    "medical-appointments": medical_appointments_table,
}


async def export_report(
    db: AsyncSession, kind: str, date_from: date, date_to: date, fmt: str = "xlsx"
) -> tuple[bytes, str, str]:
    """Retorna (contenido, media type, nombre de archivo)."""
    check_range(date_from, date_to)
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise ValidationException(f"Reporte desconocido: {kind}")

    table = await builder(db, date_from, date_to)
    if fmt == "csv":
        content = export_service.to_csv(table.headers, table.rows).encode("utf-8-sig")
        return content, export_service.CSV_MEDIA_TYPE, f"{table.filename}.csv"

    content = export_service.to_xlsx(table.title, table.headers, table.rows, table.summary)
    return content, export_service.XLSX_MEDIA_TYPE, f"{table.filename}.xlsx"
