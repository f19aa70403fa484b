import io
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from dietplan.domain.DietPlan import day_plan_for, meals_of
from dietplan.utilities.constants import DAY_KEYS, MEAL_CATEGORIES


def _slot_text(day_plan, category) -> str:
    names = [m.name for m in meals_of(day_plan, category)]
    return "\n".join(names) if names else "-"


def generate_pdf_for_week(plan, week_stats=None):
    """Generate a PDF table: Day / Breakfast / Lunch / Dinner / Snacks / Done for the plan.

    week_stats is the ProgressAggregator.week_stats() dict; without it the
    "Done" column only shows the number of planned meals.
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=landscape(A4),
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    title = f"Diet Plan - {plan.name} ({plan.goal.replace('_', ' ')})"
    if week_stats:
        title += f" - week of {week_stats.get('week_start', '')}"
    elements = [
        Paragraph(title, styles["Title"]),
        Paragraph(
            f"Daily targets: {plan.daily_calories:g} kcal, protein {plan.daily_protein:g} g, "
            f"carbs {plan.daily_carbs:g} g, fat {plan.daily_fat:g} g",
            styles["Normal"],
        ),
        Spacer(1, 16),
    ]

    days = (week_stats or {}).get('days', {})
    data = [["Day"] + [c.capitalize() for c in MEAL_CATEGORIES] + ["Done"]]
    for day_key in DAY_KEYS:
        day_plan = day_plan_for(plan, day_key)
        day_info = days.get(day_key)
        label = day_key.capitalize()
        if day_info:
            label += f" ({day_info.get('date', '')})"
            done = f"{day_info.get('label', '0/0')} ({day_info.get('percentage', 0)}%)"
        else:
            done = f"-/{day_plan.total_meals() if day_plan else 0}"
        if day_plan is None:
            data.append([label, "No plan", "", "", "", done])
            continue
        data.append([label] + [_slot_text(day_plan, c) for c in MEAL_CATEGORIES] + [done])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4CAF50")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 12),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 10),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]))

    elements.append(table)
    if week_stats:
        totals = week_stats.get('week_totals', {})
        elements.append(Spacer(1, 12))
        elements.append(Paragraph(
            f"Week progress: {totals.get('label', '0/0')} meals ({totals.get('percentage', 0)}%)",
            styles["Normal"],
        ))
    doc.build(elements)
    return buf.getvalue()
