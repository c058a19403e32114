"""
HTML conversion utilities for topicnews.
"""
import logging
import mistune

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_CSS = """
body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
    max-width: 800px;
    margin: 0 auto;
    padding: 50px 16px;
    background-color: #fff;
}

h1 {
    font-size: 24px;
    text-align: center;
    margin-bottom: 16px;
}

code {
    background-color: #eee;
    border-radius: 16px;
    padding: 4px 8px;
    margin-right: 8px;
    font-size: 14px;
    font-family: inherit;
}

ul {
    list-style: none;
    padding: 0;
}

li {
    margin-bottom: 12px;
    padding: 8px;
    border-bottom: 1px solid #eee;
    font-size: 12px;
    color: #666;
}

li strong, li a {
    font-size: 16px;
    color: #1a1a1a;
    text-decoration: none;
}
"""

class HtmlConverter:
    """
    Converts Markdown content to a standalone HTML page.
    """
    def __init__(self, css_file: str = None):
        """
        Initialize the HtmlConverter.

        Args:
            css_file: Optional path to a CSS file to use instead of the default styles
        """
        self.css_file = css_file
        self.css_content = self._load_css()
        self.md_parser = mistune.create_markdown(escape=True)

    def _load_css(self) -> str:
        if not self.css_file:
            return DEFAULT_CSS
        try:
            with open(self.css_file, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            logger.warning(f"CSS file {self.css_file} not found. Using default styles.")
            return DEFAULT_CSS

    def convert(self, markdown_text: str, title: str = "topicnews") -> str:
        """
        Render Markdown as a complete HTML document.

        Args:
            markdown_text: Markdown source
            title: Document title

        Returns:
            HTML document as a string
        """
        body = self.md_parser(markdown_text)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{mistune.escape(title)}</title>
    <style>{self.css_content}</style>
</head>
<body>
{body}
</body>
</html>"""

    def write(self, markdown_text: str, html_file_path: str, title: str = "topicnews") -> bool:
        """
        Render Markdown and write the HTML page to a file.

        Returns:
            True if successful, False otherwise
        """
        try:
            with open(html_file_path, 'w', encoding='utf-8') as html_file:
                html_file.write(self.convert(markdown_text, title))
        except OSError as e:
            logger.error(f"Error writing HTML to {html_file_path}: {e}")
            return False

        logger.info(f"Successfully wrote {html_file_path}")
        return True
