"""
Codec XML para el servicio rs.ge

- Escapa valores escalares y arma el bloque plano de parámetros del request.
- Extrae valores y bloques repetidos de las respuestas.

La extracción usa lxml en modo recover y busca elementos por local-name,
así que tolera prefijos, atributos y tags homónimos anidados. Contrato con
el transporte: los datos obligatorios viajan como texto de elemento, nunca
como atributos.
"""
import copy
import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, List, Mapping, Optional, Union

import lxml.etree as etree

_XML_DECL_RE = re.compile(r"^\s*<\?xml[^>]*\?>\s*", re.I)
# "&" suelto (no inicia una entidad): en modo recover lxml lo descarta
_STRAY_AMP_RE = re.compile(r"&(?!#[0-9]+;|#x[0-9a-fA-F]+;|[A-Za-z_][\w.-]*;)")

# Wrapper para poder parsear fragmentos con varios elementos raíz o solo texto
_FRAGMENT_TAG = "rsge-fragment"

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


class RawXml(str):
    """Fragmento XML ya serializado; build_params lo inserta tal cual"""


ParamValue = Union[str, int, float, Decimal, bool, date, None, RawXml]


def escape_xml(text: str) -> str:
    """Reemplaza & < > " ' por sus entidades. Aplicar una sola vez por valor."""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def format_scalar(value: Any) -> str:
    """Convierte un escalar Python al texto que espera rs.ge (sin escapar)"""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, float):
        # 10.0 -> "10", igual que el formulario web
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def build_params(params: Mapping[str, ParamValue]) -> RawXml:
    """
    Construye el bloque de parámetros <clave>valor</clave> en orden de inserción

    Los valores RawXml (ej: <GOODS_LIST>...</GOODS_LIST>) se insertan sin
    escapar y sin envolver; el resto pasa por format_scalar + escape_xml.
    """
    parts = []
    for key, value in params.items():
        if isinstance(value, RawXml):
            parts.append(str(value))
        else:
            parts.append(f"<{key}>{escape_xml(format_scalar(value))}</{key}>")
    return RawXml("".join(parts))


def build_element(tag: str, params: Mapping[str, ParamValue]) -> RawXml:
    """Envuelve build_params(params) en <tag>...</tag>"""
    return RawXml(f"<{tag}>{build_params(params)}</{tag}>")


def build_list(tag: str, items: List[RawXml]) -> RawXml:
    """Concatena bloques ya construidos dentro de <tag>...</tag> (GOODS_LIST, ITEMS_LIST)"""
    return RawXml(f"<{tag}>{''.join(items)}</{tag}>")


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------
def _make_parser() -> etree.XMLParser:
    # Un parser por llamada: los parsers de lxml no se comparten entre threads
    return etree.XMLParser(
        recover=True,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )


def parse_fragment(xml: Union[str, bytes, None]) -> Optional[Any]:
    """
    Parsea un documento o fragmento XML envuelto en un elemento sintético

    Returns:
        Elemento wrapper, o None si lxml no pudo recuperar nada
    """
    if xml is None:
        return None
    if isinstance(xml, bytes):
        xml = xml.decode("utf-8", errors="replace")
    body = _XML_DECL_RE.sub("", xml.lstrip("\ufeff"), count=1)
    body = _STRAY_AMP_RE.sub("&amp;", body)
    wrapped = f"<{_FRAGMENT_TAG}>{body}</{_FRAGMENT_TAG}>".encode("utf-8")
    try:
        return etree.fromstring(wrapped, _make_parser())
    except etree.XMLSyntaxError:
        return None


def local_name(element: Any) -> Optional[str]:
    """Nombre local del tag, sin namespace ni prefijo (None para comentarios/PIs)"""
    tag = element.tag
    if not isinstance(tag, str):
        return None
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    # Prefijos no declarados quedan literales en modo recover ("soap:Fault")
    return tag.rsplit(":", 1)[-1]


def iter_named(root: Any, tag: str) -> Iterator[Any]:
    """Descendientes de root (sin incluir root) con local-name == tag, en orden de documento"""
    for element in root.iterdescendants():
        if local_name(element) == tag:
            yield element


def find_named(root: Any, tag: str) -> Optional[Any]:
    for element in iter_named(root, tag):
        return element
    return None


def element_text(element: Any) -> str:
    return "".join(element.itertext()).strip()


def inner_xml(element: Any) -> str:
    """
    Serializa el contenido de element (texto + hijos) sin el tag propio

    Los tags se reescriben sin namespace para que el resultado sea el mismo
    fragmento plano que devolvería el servicio.
    """
    clone = copy.deepcopy(element)
    for node in clone.iter():
        name = local_name(node)
        if name is not None:
            node.tag = name
    etree.cleanup_namespaces(clone)

    parts = [escape_xml(clone.text or "")]
    for child in clone:
        parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


# ---------------------------------------------------------------------
# Extracción
# ---------------------------------------------------------------------
def extract_value(xml: Union[str, bytes, None], tag: str) -> str:
    """
    Texto (trim) del primer <tag> del documento

    Nunca lanza: devuelve "" si el tag no existe o el XML es irrecuperable.
    El llamador decide si el campo vacío es obligatorio.
    """
    root = parse_fragment(xml)
    if root is None:
        return ""
    element = find_named(root, tag)
    if element is None:
        return ""
    return element_text(element)


def extract_blocks(xml: Union[str, bytes, None], tag: str) -> List[str]:
    """
    Todas las ocurrencias externas de <tag>...</tag> como fragmentos, en orden

    Un <tag> anidado dentro de otro <tag> queda dentro del bloque externo,
    no se devuelve como bloque aparte.
    """
    root = parse_fragment(xml)
    if root is None:
        return []
    blocks = []
    for element in iter_named(root, tag):
        if any(local_name(ancestor) == tag for ancestor in element.iterancestors()):
            continue
        blocks.append(etree.tostring(element, encoding="unicode", with_tail=False))
    return blocks


def extract_text(xml: Union[str, bytes, None]) -> str:
    """Texto decodificado de un fragmento completo (resultados escalares: nombre, bool)"""
    root = parse_fragment(xml)
    if root is None:
        return ""
    return element_text(root)
