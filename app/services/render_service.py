"""
Rendu Markdown + nettoyage HTML.

Le contenu est stocké brut et nettoyé seulement à l'affichage: nettoyer le
source Markdown casse la syntaxe (ex: citation avec ">"). Les noms de page,
eux, sont nettoyés à l'écriture.
"""

import re
import markdown
import nh3

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "def_list", "sane_lists", "nl2br"]

ALLOWED_TAGS = set(nh3.ALLOWED_TAGS)
ALLOWED_ATTRIBUTES = {tag: set(attrs) for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()}
# garder "language-xxx" des blocs de code
ALLOWED_ATTRIBUTES.setdefault("code", set()).add("class")

_KEBAB_WORDS = re.compile(r"[A-Z]{2,}(?=[A-Z][a-z]+[0-9]*|\b)|[A-Z]?[a-z]+[0-9]*|[A-Z]|[0-9]+")


def sanitize_html(html: str) -> str:
    return nh3.clean(html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES)


def render_markdown(text: str) -> str:
    """Markdown -> HTML sûr. Un retour à la ligne simple devient un <br>."""
    html = markdown.markdown(text or "", extensions=MARKDOWN_EXTENSIONS)
    return sanitize_html(html)


def sanitize_name(name: str) -> str:
    # aucun tag autorisé: le texte reste, le markup part
    return nh3.clean(name, tags=set())


def normalize_page_name(name: str) -> str:
    proper_name = name.strip().replace(" ", "-").lower()
    return sanitize_name(proper_name)


def to_kebab_case(text: str) -> str:
    """'Getting Started' -> 'getting-started', 'HTMLParser2' -> 'html-parser2'"""
    return "-".join(_KEBAB_WORDS.findall(text)).lower()


def kebab_to_normal_case(name: str) -> str:
    return name.replace("-", " ").title()
