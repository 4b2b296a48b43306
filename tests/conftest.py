import sys
from pathlib import Path

import pytest
from PIL import Image
from pptx import Presentation
from pptx.util import Pt

# Ensure project root is on sys.path so `import content_slides` works without installation
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from content_slides.pptx_renderer import PPTXRenderer  # noqa: E402


@pytest.fixture
def prs():
    """Blank python-pptx presentation sized like the default theme."""
    presentation = Presentation()
    presentation.slide_width = Pt(960)
    presentation.slide_height = Pt(540)
    return presentation


@pytest.fixture
def blank_slide(prs):
    layout = next(layout for layout in prs.slide_layouts if layout.name == "Blank")
    return prs.slides.add_slide(layout)


@pytest.fixture
def renderer():
    return PPTXRenderer(theme="default")


@pytest.fixture
def sample_png(tmp_path):
    """A 400x200 px PNG on disk."""
    path = tmp_path / "logo.png"
    Image.new("RGB", (400, 200), "blue").save(path)
    return path
