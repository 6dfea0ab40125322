# registre_backend/app/services/export/pdf_generator.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import jinja2

from ...schemas.registre import DocumentTemplate

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y %H:%M"

# Page layout shared by every register. Content blocks are produced by the
# content generator; each block lists its services and record sections.
REGISTRE_TEMPLATE = """
<!DOCTYPE html>
<html lang="fr">
<head>
    <meta charset="utf-8">
    <title>{{ page.title }}</title>
    <style>
        @page {
            size: A4 landscape;
            margin: 1.5cm 1cm 1.5cm 1cm;
            @top-left { content: "{{ page.title }}{% if page.numero %} n° {{ page.numero }}{% endif %}"; font-size: 8pt; }
            @top-right { content: "Édité le {{ generated_at }} ({{ page.fuseau_horaire }})"; font-size: 8pt; }
            @bottom-left { content: "{{ page.service_path }}"; font-size: 8pt; }
            @bottom-right { content: "Page " counter(page) " / " counter(pages); font-size: 8pt; }
        }
        body {
            font-family: 'Helvetica', 'Arial', sans-serif;
            font-size: 9pt;
            color: #222;
        }
        h1 { font-size: 16pt; margin-bottom: 4px; }
        h2 {
            font-size: 12pt;
            margin-top: 18px;
            padding: 4px 6px;
            background-color: #e9ecef;
            border-left: 4px solid #333;
        }
        .periode { color: #555; margin-bottom: 12px; }
        .services { columns: 2; margin: 0; padding-left: 16px; }
        table { width: 100%; border-collapse: collapse; page-break-inside: auto; }
        tr { page-break-inside: avoid; }
        th, td { border: 1px solid #ccc; padding: 3px 5px; vertical-align: top; }
        th { background-color: #f8f9fa; text-align: left; }
        .empty { font-style: italic; color: #777; }
    </style>
</head>
<body>
{% for block in content %}
    <h1>{{ page.title }}</h1>
    {% if block.periode %}<div class="periode">{{ block.periode }}</div>{% endif %}

    <h2>Services ({{ block.services|length }})</h2>
    <ul class="services">
    {% for service in block.services %}
        <li>{{ service.libelle }}{% if service.abreviation %} ({{ service.abreviation }}){% endif %}</li>
    {% endfor %}
    </ul>

    {% for section in block.sections %}
    <h2>{{ section.title }} ({{ section.rows|length }})</h2>
    {% if section.rows %}
    <table>
        <thead>
            <tr>{% for column in section.columns %}<th>{{ column }}</th>{% endfor %}</tr>
        </thead>
        <tbody>
        {% for row in section.rows %}
            <tr>{% for cell in row %}<td>{{ cell }}</td>{% endfor %}</tr>
        {% endfor %}
        </tbody>
    </table>
    {% else %}
    <p class="empty">{{ section.empty_label }}</p>
    {% endif %}
    {% endfor %}
{% endfor %}
</body>
</html>
"""


def format_local(value: Optional[datetime], fuseau_horaire: str) -> str:
    """Render a timestamp in the requester's timezone, empty when absent."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(fuseau_horaire)).strftime(DATE_FORMAT)


@dataclass
class RegisterDocumentBuilder:
    """Document definition under construction: page data plus content blocks."""

    template: DocumentTemplate
    generated_at: datetime
    content: List[Dict[str, Any]] = field(default_factory=list)


class RegisterPdfEngine:
    """Turns register document definitions into PDF bytes with WeasyPrint."""

    def __init__(self, title: str = "Registre"):
        self.title = title
        self.jinja_env = jinja2.Environment(
            loader=jinja2.DictLoader({"registre.html": REGISTRE_TEMPLATE}),
            autoescape=jinja2.select_autoescape(default=True),
        )

    def get_default_page(
        self, fuseau_horaire: str, numero: str = "", service_path: str = ""
    ) -> DocumentTemplate:
        return DocumentTemplate(
            fuseau_horaire=fuseau_horaire,
            numero=numero,
            service_path=service_path,
            title=self.title,
        )

    def new_document(self, template: DocumentTemplate) -> RegisterDocumentBuilder:
        return RegisterDocumentBuilder(
            template=template, generated_at=datetime.now(timezone.utc)
        )

    def render_html(self, builder: RegisterDocumentBuilder) -> str:
        template = self.jinja_env.get_template("registre.html")
        return template.render(
            page=builder.template,
            generated_at=format_local(
                builder.generated_at, builder.template.fuseau_horaire
            ),
            content=builder.content,
        )

    def render(self, builder: RegisterDocumentBuilder) -> bytes:
        """Generate the PDF for a document definition."""
        # Imported here: WeasyPrint loads Pango when imported
        from weasyprint import HTML

        html_str = self.render_html(builder)
        pdf_bytes = HTML(string=html_str).write_pdf()
        logger.debug(f"Rendered register PDF of {len(pdf_bytes or b'')} bytes")
        return pdf_bytes or b""
