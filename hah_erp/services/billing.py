"""
Cálculos de costos, utilidades y montos facturables.

Funciones puras (sin DB) usadas por los servicios de catálogo, registros
de procedimientos, laboratorio y cuidados en casa. Todos los montos se
redondean a 2 decimales (ROUND_HALF_UP) solo al final de cada cálculo.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

ZERO = Decimal("0")
CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Convierte a Decimal y redondea a céntimos."""
    if value is None:
        return ZERO.quantize(CENT)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ── Catálogo de procedimientos ───────────────────────


@dataclass
class MaterialLine:
    name: str
    quantity: Decimal
    unit_cost: Decimal
    sort_order: int = 0

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_cost


def normalize_materials(materials: Iterable) -> list[MaterialLine]:
    """
    Limpia la lista de materiales de un procedimiento.

    - Recorta nombres y descarta los vacíos.
    - Fusiona nombres repetidos sumando cantidades; conserva el primer
      costo unitario y el orden de primera aparición.
    - Cantidad ausente o <= 0 se toma como 1.
    - Renumera sort_order desde 0.

    Acepta objetos con atributos `name`/`quantity`/`unit_cost` o dicts.
    """
    merged: dict[str, MaterialLine] = {}
    for raw in materials:
        if isinstance(raw, Mapping):
            name, quantity, unit_cost = raw.get("name"), raw.get("quantity"), raw.get("unit_cost")
        else:
            name = getattr(raw, "name", None)
            quantity = getattr(raw, "quantity", None)
            unit_cost = getattr(raw, "unit_cost", None)

        name = (name or "").strip()
        if not name:
            continue
        qty = _dec(quantity)
        if qty <= 0:
            qty = Decimal("1")

        if name in merged:
            merged[name].quantity += qty
        else:
            merged[name] = MaterialLine(name=name, quantity=qty, unit_cost=_dec(unit_cost))

    lines = list(merged.values())
    for index, line in enumerate(lines):
        line.sort_order = index
    return lines


@dataclass
class CatalogTotals:
    materials_cost: Decimal
    total_cost: Decimal
    utility: Decimal


def catalog_totals(
    base_price,
    professional_fees,
    mobility_cost,
    materials: Iterable[MaterialLine],
) -> CatalogTotals:
    """
    total_cost = honorarios + movilidad + Σ(cantidad × costo unitario)
    utility    = precio base − total_cost
    """
    materials_cost = sum((line.subtotal for line in materials), ZERO)
    total_cost = _dec(professional_fees) + _dec(mobility_cost) + materials_cost
    return CatalogTotals(
        materials_cost=money(materials_cost),
        total_cost=money(total_cost),
        utility=money(_dec(base_price) - total_cost),
    )


# ── Registros de procedimientos (pagos) ──────────────

# método → columna de pago del registro
PAYMENT_METHODS: dict[str, str] = {
    "yape": "yape",
    "plin": "plin",
    "transferencia": "transfer_deposit",
    "tarjeta": "card_link_pos",
    "efectivo": "cash",
}

PAYMENT_METHOD_OPTIONS: list[dict[str, str]] = [
    {"value": "yape", "label": "Yape"},
    {"value": "plin", "label": "Plin"},
    {"value": "transferencia", "label": "Transferencia / Depósito"},
    {"value": "tarjeta", "label": "Tarjeta / Link / POS"},
    {"value": "efectivo", "label": "Efectivo"},
]


def payment_columns_for(method: str, amount) -> dict[str, Decimal]:
    """Reparte un pago de un solo método en las columnas del registro."""
    if method not in PAYMENT_METHODS:
        raise ValueError(f"Método de pago desconocido: {method}")
    columns = {column: ZERO for column in PAYMENT_METHODS.values()}
    columns[PAYMENT_METHODS[method]] = money(amount)
    return columns


def payment_from_columns(columns: Mapping[str, object]) -> tuple[str, Decimal]:
    """Método y monto de la primera columna con pago; ("efectivo", 0) si no hay."""
    for method, column in PAYMENT_METHODS.items():
        amount = _dec(columns.get(column))
        if amount > 0:
            return method, money(amount)
    return "efectivo", money(ZERO)


def record_income(columns: Mapping[str, object]) -> Decimal:
    """Ingreso = suma de todas las columnas de pago."""
    return money(sum((_dec(columns.get(c)) for c in PAYMENT_METHODS.values()), ZERO))


def record_cost(catalog_cost, material_expenses, fuel, additional_cost) -> Decimal:
    return money(
        _dec(catalog_cost) + _dec(material_expenses) + _dec(fuel) + _dec(additional_cost)
    )


def record_utility(income, catalog_cost, material_expenses, fuel, additional_cost) -> Decimal:
    """utility = ingreso − costo catálogo − gastos material − combustible − costo adicional"""
    return money(_dec(income) - record_cost(catalog_cost, material_expenses, fuel, additional_cost))


# ── Laboratorio ──────────────────────────────────────


@dataclass
class LabQuoteLine:
    price: Decimal
    client_price: Decimal


@dataclass
class LabQuote:
    lines: list[LabQuoteLine] = field(default_factory=list)
    unit_surcharge: Decimal = ZERO
    subtotal: Decimal = ZERO
    client_total: Decimal = ZERO
    home_visit_cost: Decimal = ZERO
    total: Decimal = ZERO


def lab_quote(prices: list, markup_rate, surcharge_total, home_visit_cost) -> LabQuote:
    """
    El recargo total (toma de muestra a domicilio) se reparte en partes iguales
    entre los exámenes; cada examen se cobra precio × markup + recargo unitario.
    """
    if not prices:
        raise ValueError("Se requiere al menos un examen")
    unit_surcharge = _dec(surcharge_total) / len(prices)
    lines = [
        LabQuoteLine(
            price=money(price),
            client_price=money(_dec(price) * _dec(markup_rate) + unit_surcharge),
        )
        for price in prices
    ]
    client_total = sum((line.client_price for line in lines), ZERO)
    visit = money(home_visit_cost)
    return LabQuote(
        lines=lines,
        unit_surcharge=money(unit_surcharge),
        subtotal=money(sum((_dec(p) for p in prices), ZERO)),
        client_total=money(client_total),
        home_visit_cost=visit,
        total=money(client_total + visit),
    )


# ── Cuidados en casa (quincenas) ─────────────────────


@dataclass
class QuincenaBilling:
    quincena_amount: Decimal
    per_day: Decimal
    per_hour: Decimal
    holiday_count: int
    holiday_amount: Decimal
    pause_hours: int
    pause_deduction: Decimal
    total_amount: Decimal


def quincena_billing(
    monthly_amount,
    holiday_count: int,
    pause_hours: int,
    default_quincena=Decimal("2500"),
    days: int = 15,
) -> QuincenaBilling:
    """
    quincena  = mensual / 2  (o el monto por defecto si no hay mensual)
    por día   = quincena / 15
    por hora  = por día / 24
    total     = quincena + feriados × por día − horas de pausa × por hora
    """
    monthly = _dec(monthly_amount)
    quincena = monthly / 2 if monthly > 0 else _dec(default_quincena)
    per_day = quincena / days
    per_hour = per_day / 24
    holiday_count = max(holiday_count, 0)
    pause_hours = max(pause_hours, 0)

    holiday_amount = per_day * holiday_count
    pause_deduction = per_hour * pause_hours
    total = quincena + holiday_amount - pause_deduction
    if total < 0:
        total = ZERO

    return QuincenaBilling(
        quincena_amount=money(quincena),
        per_day=money(per_day),
        per_hour=money(per_hour),
        holiday_count=holiday_count,
        holiday_amount=money(holiday_amount),
        pause_hours=pause_hours,
        pause_deduction=money(pause_deduction),
        total_amount=money(total),
    )


# ── Precios legacy ───────────────────────────────────


def parse_legacy_price(value) -> Decimal:
    """
    Convierte precios importados como texto ("S/ 1,234.50", "S/.80") a Decimal.
    Texto sin número se toma como 0.
    """
    if value is None:
        return ZERO
    if isinstance(value, (int, float, Decimal)):
        return money(value)
    cleaned = str(value).replace("S/.", "").replace("S/", "").replace(",", "").strip()
    try:
        return money(Decimal(cleaned))
    except ArithmeticError:
        return ZERO
