"""Accessible (PDF/UA-1) cover document writer using pikepdf."""

import io
import logging
import uuid
from datetime import datetime, timezone
from xml.sax.saxutils import escape

import pikepdf
from pikepdf import Array, Dictionary, Name, String

from ..models import FALLBACK_CAPTION, ExtractedImage, PageGeometry

logger = logging.getLogger(__name__)

IMAGE_RESOURCE = "Im0"
FIGURE_MCID = 0

XMP_TEMPLATE = """<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
    <rdf:Description rdf:about=""
        xmlns:dc="http://purl.org/dc/elements/1.1/"
        xmlns:pdf="http://ns.adobe.com/pdf/1.3/"
        xmlns:pdfuaid="http://www.aiim.org/pdfua/ns/id/"
        xmlns:xmp="http://ns.adobe.com/xap/1.0/"
        xmlns:xmpMM="http://ns.adobe.com/xap/1.0/mm/">
      <dc:title><rdf:Alt><rdf:li xml:lang="x-default">{title}</rdf:li></rdf:Alt></dc:title>
      <dc:language><rdf:Bag><rdf:li>{language}</rdf:li></rdf:Bag></dc:language>
      <pdf:Producer>pdf-cover</pdf:Producer>
      <xmp:CreateDate>{created}</xmp:CreateDate>
      <xmp:CreatorTool>pdf-cover</xmp:CreatorTool>
      <xmpMM:DocumentID>uuid:{document_id}</xmpMM:DocumentID>
      <pdfuaid:part>1</pdfuaid:part>
    </rdf:Description>
  </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""


def build_cover(
    source_pdf: pikepdf.Pdf,
    geometry: PageGeometry,
    image: ExtractedImage,
    title: str,
    language: str,
    caption: str,
) -> bytes:
    """Write a single-page tagged PDF showing ``image`` across the whole page.

    The image stream is deep-copied out of the source PDF and scaled
    independently on both axes to exactly cover the page.

    Args:
        source_pdf: Open source PDF holding the image; must stay open
            until this returns.
        geometry: Size of the output page.
        image: Image located on the source's first page.
        title: Document title.
        language: Document language tag, e.g. "en-US".
        caption: Alt text attached to the figure.

    Returns:
        Serialized PDF bytes.
    """
    if not caption or not caption.strip():
        caption = FALLBACK_CAPTION

    width, height = geometry.width, geometry.height

    # Copied stream data is read from source_pdf during save
    with pikepdf.new() as pdf:
        image_stream = _copy_image(pdf, source_pdf, image.name)

        content = (
            f"/Figure <</MCID {FIGURE_MCID}>> BDC\n"
            f"q\n{_num(width)} 0 0 {_num(height)} 0 0 cm\n/{IMAGE_RESOURCE} Do\nQ\n"
            "EMC\n"
        )
        page_dict = pdf.make_indirect(
            Dictionary(
                Type=Name.Page,
                MediaBox=Array([0, 0, width, height]),
                Resources=Dictionary(
                    XObject=Dictionary({f"/{IMAGE_RESOURCE}": image_stream}),
                ),
                Contents=pdf.make_stream(content.encode("ascii")),
                StructParents=0,
                Tabs=Name.S,
            )
        )
        pdf.pages.append(pikepdf.Page(page_dict))
        page = pdf.pages[0].obj

        _add_structure_tree(pdf, page, geometry, caption)
        _set_document_metadata(pdf, title, language)

        buffer = io.BytesIO()
        pdf.save(buffer)

    logger.debug(f"Built cover {_num(width)}x{_num(height)} with image /{image.name}")
    return buffer.getvalue()


def _copy_image(pdf: pikepdf.Pdf, source_pdf: pikepdf.Pdf, name: str) -> pikepdf.Stream:
    """Deep-copy the first page's image XObject ``name`` into ``pdf``."""
    resources = _page_resources(source_pdf.pages[0].obj)
    image_stream = pdf.copy_foreign(resources.XObject[f"/{name}"])
    # Would point into the source's structure tree
    if "/StructParent" in image_stream:
        del image_stream["/StructParent"]
    return image_stream


def _page_resources(page: pikepdf.Dictionary) -> pikepdf.Dictionary:
    """Return the /Resources of a page, inherited from the page tree if needed."""
    node = page
    while node is not None:
        if "/Resources" in node:
            return node.Resources
        node = node.get("/Parent")
    raise KeyError("Page has no /Resources")


def _add_structure_tree(pdf: pikepdf.Pdf, page: pikepdf.Dictionary, geometry: PageGeometry, caption: str) -> None:
    """Tag the page content as Document > Figure with alt text."""
    struct_root = pdf.make_indirect(Dictionary(Type=Name.StructTreeRoot))
    document_elem = pdf.make_indirect(
        Dictionary(Type=Name.StructElem, S=Name.Document, P=struct_root)
    )
    figure_elem = pdf.make_indirect(
        Dictionary(
            Type=Name.StructElem,
            S=Name.Figure,
            P=document_elem,
            Pg=page,
            K=FIGURE_MCID,
            Alt=String(caption),
            A=Dictionary(
                O=Name.Layout,
                BBox=Array([0, 0, geometry.width, geometry.height]),
            ),
        )
    )
    document_elem.K = Array([figure_elem])

    struct_root.K = document_elem
    struct_root.ParentTree = pdf.make_indirect(
        Dictionary(Nums=Array([0, Array([figure_elem])]))
    )
    struct_root.ParentTreeNextKey = 1

    pdf.Root.StructTreeRoot = struct_root
    pdf.Root.MarkInfo = Dictionary(Marked=True)


def _set_document_metadata(pdf: pikepdf.Pdf, title: str, language: str) -> None:
    """Set title, language and the PDF/UA identification."""
    pdf.Root.Lang = String(language)
    pdf.Root.ViewerPreferences = Dictionary(DisplayDocTitle=True)
    pdf.docinfo["/Title"] = String(title)
    pdf.docinfo["/Producer"] = String("pdf-cover")

    xmp = XMP_TEMPLATE.format(
        title=escape(title),
        language=escape(language),
        created=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        document_id=uuid.uuid4(),
    )
    metadata_stream = pdf.make_stream(xmp.encode("utf-8"))
    metadata_stream.Type = Name.Metadata
    metadata_stream.Subtype = Name.XML
    pdf.Root.Metadata = metadata_stream


def _num(value: float) -> str:
    """Format a number for a content stream."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text or "0"
