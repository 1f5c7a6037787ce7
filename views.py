from html import escape
from typing import Iterable

from models import Disc


PAGE_STYLE = """
      body {
        font-family: Arial, sans-serif;
        margin: 0;
        padding: 20px;
      }
      h1 {
        text-align: center;
        margin-bottom: 20px;
      }
      #discs {
        display: grid;
        grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
        grid-gap: 20px;
      }
      .disc {
        border: 1px solid #ccc;
        padding: 10px;
        text-align: center;
      }
      .disc img {
        width: 100%;
        height: auto;
        margin-bottom: 10px;
      }
      .disc h2 {
        font-size: 18px;
        margin-bottom: 5px;
      }
      .disc p {
        font-size: 14px;
        color: #666;
      }
"""


def render_disc(disc: Disc) -> str:
    """Render one grid cell; discs without a cover get no <img>"""
    image = ""
    if disc.cover:
        image = f'<img src="{escape(disc.cover)}" alt="{escape(disc.title)}" loading="lazy" />'
    return (
        '<div class="disc">'
        f'<a href="{escape(disc.link)}">{image}<h2>{escape(disc.title)}</h2></a>'
        f"<p>{escape(disc.label)}</p>"
        "</div>"
    )


def render_page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8" />
    <title>{escape(title)}</title>
    <style>{PAGE_STYLE}</style>
  </head>
  <body>
    <h1>{escape(title)}</h1>
    {body}
  </body>
</html>
"""


def render_collection(discs: Iterable[Disc]) -> str:
    """Render the CD collection grid page"""
    cells = "\n".join(render_disc(disc) for disc in discs)
    return render_page("My CD Collection", f'<div id="discs">\n{cells}\n</div>')


def render_error(message: str) -> str:
    return render_page("My CD Collection", f"<p>{escape(message)}</p>")
