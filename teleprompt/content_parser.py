import logging
import os
import re
from html.parser import HTMLParser

import fitz
import markdown
from docx import Document
from rich.console import Console
from striprtf.striprtf import rtf_to_text


class HTMLtoLines(HTMLParser):
    """Collects the text of an HTML document as one line per block element."""

    BLOCK_TAGS = {
        "p", "div", "br", "li", "h1", "h2", "h3", "h4", "h5", "h6",
        "blockquote", "pre", "tr", "section", "article", "header", "footer",
    }
    SKIP_TAGS = {"script", "style", "head", "title"}

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.lines = []
        self._current = []
        self._skip_depth = 0

    def _flush(self):
        text = re.sub(r"\s+", " ", "".join(self._current)).strip()
        if text:
            self.lines.append(text)
        self._current = []

    def handle_starttag(self, tag, attrs):
        if tag in self.SKIP_TAGS:
            self._skip_depth += 1
        elif tag in self.BLOCK_TAGS:
            self._flush()

    def handle_endtag(self, tag):
        if tag in self.SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in self.BLOCK_TAGS:
            self._flush()

    def handle_data(self, data):
        if not self._skip_depth:
            self._current.append(data)

    def get_lines(self):
        self._flush()
        return self.lines


def join_paragraphs(paragraphs):
    """Join paragraphs with a blank line, dropping empty ones."""
    return "\n\n".join(p.strip() for p in paragraphs if p and p.strip())


def _read_text_file(file_path):
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except UnicodeDecodeError:
        with open(file_path, 'r', encoding='latin-1') as f:
            return f.read()


def extract_content(file_path, console: Console) -> str:
    """
    Load the readable text of a document.

    Supports .txt, .md, .html/.htm, .docx, .pdf and .rtf; anything else is
    read as plain text. Paragraphs are separated by a blank line.

    Args:
        file_path: Path to the document
        console: Rich console used to report failures

    Returns:
        str: The document text, or "" if it could not be read
    """
    ext = os.path.splitext(file_path)[1].lower()
    extractors = {
        '.txt': _extract_content_txt,
        '.md': _extract_content_md,
        '.markdown': _extract_content_md,
        '.html': _extract_content_html,
        '.htm': _extract_content_html,
        '.docx': _extract_content_docx,
        '.pdf': _extract_content_pdf,
        '.rtf': _extract_content_rtf,
    }
    extractor = extractors.get(ext, _extract_content_txt)
    try:
        content = extractor(file_path)
    except Exception as e:
        console.print(f"[bold red]Error: Failed to read {os.path.basename(file_path)}: {e}[/bold red]")
        logging.error(f"Failed to extract content from {file_path}: {e}", exc_info=True)
        return ""

    if not content:
        console.print(f"[bold red]No text content found in {os.path.basename(file_path)}.[/bold red]")
        logging.error(f"No text content found in {file_path}")
    return content


def _extract_content_txt(file_path):
    content = _read_text_file(file_path).replace('\r\n', '\n').replace('\r', '\n')
    return join_paragraphs(re.split(r'\n\s*\n', content))


def _extract_content_md(file_path):
    html_content = markdown.markdown(_read_text_file(file_path), extensions=['fenced_code'])
    return _html_to_text(html_content)


def _extract_content_html(file_path):
    return _html_to_text(_read_text_file(file_path))


def _html_to_text(html_content):
    parser = HTMLtoLines()
    parser.feed(html_content)
    parser.close()
    return join_paragraphs(parser.get_lines())


def _extract_content_docx(file_path):
    """
    Extracts content from a .docx file, preserving paragraphs.
    It uses the 'python-docx' library.
    """
    doc = Document(file_path)
    return join_paragraphs(para.text for para in doc.paragraphs)


def _extract_content_pdf(file_path):
    """Extracts page text from a PDF with PyMuPDF, one paragraph per text block."""
    paragraphs = []
    with fitz.open(file_path) as doc:
        for page in doc:
            for block in page.get_text("blocks"):
                # block: (x0, y0, x1, y1, text, block_no, block_type); type 0 is text
                if block[6] == 0:
                    paragraphs.append(re.sub(r'\s*\n\s*', ' ', block[4]))
    return join_paragraphs(paragraphs)


def _extract_content_rtf(file_path):
    """
    Extracts content from an .rtf file using the 'striprtf' library.
    """
    with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
        rtf_content = f.read()
    text_content = rtf_to_text(rtf_content, errors="ignore")
    text_content = text_content.replace('\r\n', '\n').replace('\r', '\n')
    return join_paragraphs(text_content.split('\n'))
