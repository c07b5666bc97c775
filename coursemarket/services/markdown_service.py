from typing import Optional

import markdown

class MarkdownService:
    def __init__(self):
        self.md = markdown.Markdown(
            extensions=[
                'extra',
                'sane_lists',
                'nl2br',
                'toc'
            ]
        )

    def convert_to_html(self, markdown_text: Optional[str]) -> Optional[str]:
        """Конвертирует Markdown урока в HTML"""
        if not markdown_text:
            return None
        html = self.md.convert(markdown_text)
        # Экземпляр переиспользуется между уроками
        self.md.reset()
        return html
