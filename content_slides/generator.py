#!/usr/bin/env python3
"""
Main slide generator module that ties together markup parsing and the PowerPoint renderer.
"""

import logging
import time
from pathlib import Path
from typing import Mapping, Optional, Tuple

from pptx import Presentation
from pptx.util import Pt

from .errors import EmptyInputError, InvalidMarkupError, UnsupportedFormatError
from .importer import ImportSession
from .markup_parser import SNIPPET_LENGTH, parse_markup
from .models import ContentFormat, GenerationReport
from .paths import resolve_output_path
from .pptx_renderer import PPTXRenderer
from .templates import apply_footer, open_template, read_footer

logger = logging.getLogger(__name__)


class SlideGenerator:
    """
    Main class for generating PowerPoint slides from XML, JSON or Markdown content.
    """

    def __init__(
        self,
        *,
        theme: str = "default",
        template_path: Optional[str] = None,
        debug: bool = False,
        markdown_emphasis: bool = False,
    ):
        """Create a new :class:`SlideGenerator`.

        Parameters
        ----------
        theme
            Name of the CSS theme to apply (``default`` / ``segoe-amber`` / …).
            Supplies the slide size and fallback fonts when no template is used.
        template_path
            Optional corporate template (``.pptx`` or ``.potx``). Its layouts
            become available to ``<slide layout="…">`` and its master footer
            is copied onto every slide.
        debug
            Enable verbose logging.
        markdown_emphasis
            Parse ``**bold**``, ``*italic*`` and ``++underline++`` in Markdown
            lines. Off by default, so every line is kept exactly as written.
        """
        self.theme = theme
        self.template_path = template_path
        self.debug = debug
        self.markdown_emphasis = markdown_emphasis
        self.pptx_renderer = PPTXRenderer(theme=theme, debug=debug)
        self._template_renderer: Optional[PPTXRenderer] = None

    def _renderer_for(self, template_path: Optional[str]) -> PPTXRenderer:
        """Theme-font renderer for plain decks; template decks keep their own fonts."""
        if not template_path:
            return self.pptx_renderer
        if self._template_renderer is None:
            self._template_renderer = PPTXRenderer(theme=self.theme, debug=self.debug, use_theme_font=False)
        return self._template_renderer

    def _base_presentation(self, template_path: Optional[str]):
        if template_path:
            return open_template(template_path)

        prs = Presentation()
        prs.slide_width = Pt(self.pptx_renderer.theme_config['slide_width'])
        prs.slide_height = Pt(self.pptx_renderer.theme_config['slide_height'])
        return prs

    def build_presentation(
        self,
        content: str,
        fmt,
        mapping: Optional[Mapping[str, str]] = None,
        template_path: Optional[str] = None,
    ) -> Tuple[object, GenerationReport]:
        """
        Parse *content* and render it into a new in-memory presentation.

        Returns:
            ``(presentation, report)``; the report has no output path yet.

        Raises:
            EmptyInputError, InvalidMarkupError, UnsupportedFormatError
        """
        start = time.perf_counter()
        if not content or not content.strip():
            raise EmptyInputError("No content to generate slides from")

        content_format = ContentFormat.parse(fmt)
        try:
            slides = parse_markup(content, content_format, markdown_emphasis=self.markdown_emphasis)
        except (InvalidMarkupError, UnsupportedFormatError) as e:
            logger.error("Generation aborted (%s): %s | content: %s", content_format.value, e, content[:SNIPPET_LENGTH])
            raise

        template_path = template_path or self.template_path
        prs = self._base_presentation(template_path)
        footer = read_footer(prs) if template_path else None
        renderer = self._renderer_for(template_path)

        report = GenerationReport()
        for index, spec in enumerate(slides):
            slide, results = renderer.render_slide(prs, spec, mapping or {}, slide_index=index)
            if footer is not None:
                apply_footer(slide, footer)
            report.results.extend(results)

        report.slide_count = len(prs.slides)
        report.elapsed_seconds = time.perf_counter() - start

        for result in report.degraded:
            logger.warning("Slide %d: %s %s (%s)", result.slide_index + 1, result.kind, result.status.value, result.reason)
        if self.debug:
            logger.info("Total slides: %d", report.slide_count)
            logger.info("Theme: %s", self.theme)
        return prs, report

    def generate(
        self,
        content: str,
        fmt,
        output_path: str = "output/presentation.pptx",
        mapping: Optional[Mapping[str, str]] = None,
        template_path: Optional[str] = None,
    ) -> GenerationReport:
        """
        Generate a PowerPoint presentation from *content* and save it.

        Args:
            content: Raw XML, JSON or Markdown text
            fmt: Content format (``ContentFormat`` or its name)
            output_path: Path where the PPTX file should be saved
            mapping: Placeholder token -> image path
            template_path: Overrides the generator's template for this call

        Returns:
            GenerationReport with slide count, per-element results and timing
        """
        prs, report = self.build_presentation(content, fmt, mapping, template_path)

        path = resolve_output_path(output_path)
        prs.save(str(path))
        report.output_path = str(path)

        logger.info(
            "Generated %d slides in %.2fs (%d degraded elements)",
            report.slide_count, report.elapsed_seconds, len(report.degraded),
        )
        return report

    def generate_from_session(self, session: ImportSession, output_path: str = "output/presentation.pptx") -> GenerationReport:
        """Generate from the content, placeholder files and template of an import session."""
        if session.content is None:
            raise EmptyInputError("Nothing has been imported")
        return self.generate(
            session.content.text,
            session.content.format,
            output_path,
            mapping=session.mapping,
            template_path=session.template_path,
        )


def main():
    """Command-line entry point for the slide generator."""
    import argparse
    import sys

    from .placeholders import parse_mapping_arg, placeholder_kind, placeholder_name
    from .theme_loader import list_available_themes, validate_theme

    def _build_parser() -> argparse.ArgumentParser:
        p = argparse.ArgumentParser(prog="content-slides", description="Generate PowerPoint slides from XML, JSON or Markdown content.")
        p.add_argument("input", type=Path, nargs="?", help="Content file to convert (omit with --clipboard)")
        p.add_argument("--format", "-f", dest="fmt", choices=["xml", "json", "markdown", "md"], help="Content format (default: from the file extension)")
        p.add_argument("--clipboard", action="store_true", help="Read pasted content from stdin and detect its format")
        p.add_argument("--output", "-o", type=Path, default=Path("output/presentation.pptx"), help="Destination PPTX path")
        p.add_argument("--map", "-m", dest="mappings", action="append", default=[], metavar="TOKEN=PATH", help="File for a placeholder, e.g. '[Insert Image: Logo]=logo.png' (repeatable)")
        p.add_argument("--template", type=Path, help="Corporate template (.pptx or .potx)")
        p.add_argument("--theme", "-t", default="default", help=f"CSS theme name ({', '.join(list_available_themes())}) or path to a .css file")
        p.add_argument("--md-emphasis", action="store_true", help="Style **bold**, *italic* and ++underline++ in Markdown lines")
        p.add_argument("--debug", action="store_true", help="Enable verbose logging")
        return p

    parser = _build_parser()
    args = parser.parse_args()
    if not validate_theme(args.theme):
        parser.error(f"unknown theme {args.theme!r}; choose one of {', '.join(list_available_themes())} or a .css file")

    # Set up logging
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(levelname)s  %(message)s")

    session = ImportSession(template_path=str(args.template) if args.template else None)
    try:
        if args.clipboard:
            session.import_text(sys.stdin.read())
        elif args.input is None:
            parser.error("an input file is required unless --clipboard is given")
        elif not args.input.exists():
            logger.error("Input file '%s' not found", args.input)
            sys.exit(1)
        else:
            session.import_file(args.input, args.fmt)

        files = {}
        for value in args.mappings:
            try:
                token, path = parse_mapping_arg(value)
            except ValueError as e:
                parser.error(str(e))
            files[token] = path
        session.resolve_placeholders(files)
        for token in session.unresolved:
            logger.warning(
                "No file for %s placeholder '%s'; a placeholder box will be drawn",
                placeholder_kind(token).lower(), placeholder_name(token),
            )

        generator = SlideGenerator(
            theme=args.theme,
            template_path=session.template_path,
            debug=args.debug,
            markdown_emphasis=args.md_emphasis,
        )
        report = generator.generate_from_session(session, str(args.output))
    except (EmptyInputError, InvalidMarkupError, UnsupportedFormatError) as e:
        logger.error("%s", e)
        sys.exit(1)

    logger.info("✅ Presentation written to %s", report.output_path)


if __name__ == "__main__":
    main()
