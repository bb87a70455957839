"""Certificate markup rendering with Jinja2.

Pure utility: no FastAPI imports, no side effects beyond reading the template file.
"""

from __future__ import annotations

from jinja2 import Environment, FileSystemLoader, TemplateError as JinjaTemplateError, select_autoescape

from app.exceptions import TemplateError


class TemplateRenderer:
    """Renders the certificate template for a participant."""

    def __init__(self, template_dir: str, template_name: str = "certificate.html") -> None:
        self.template_name = template_name
        self._env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "htm", "xml"]),
        )

    def render(self, name: str, date: str) -> str:
        """Return the certificate HTML for ``name`` issued on ``date``.

        Raises TemplateError when the template is missing, malformed, or
        raises while rendering.
        """
        try:
            template = self._env.get_template(self.template_name)
            return template.render(name=name, date=date)
        except JinjaTemplateError as exc:
            raise TemplateError(f"Template {self.template_name} failed: {exc}") from exc
        except Exception as exc:
            raise TemplateError(f"Rendering {self.template_name} raised: {exc}") from exc
