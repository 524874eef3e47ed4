from typing import NamedTuple


class Link(NamedTuple):
    """An anchor discovered on a page. `href` is already absolute."""
    href: str
    text: str = ""

    def to_dict(self) -> dict:
        return {"href": self.href, "text": self.text}


class Heading(NamedTuple):
    tag: str
    text: str

    def to_dict(self) -> dict:
        return {"tag": self.tag, "text": self.text}


class Image(NamedTuple):
    src: str
    alt: str = ""

    def to_dict(self) -> dict:
        return {"src": self.src, "alt": self.alt}
