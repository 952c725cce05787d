from typing import Any, Callable, Mapping
from .model import Entity
from .utils.htmpl import H, Node, html, raw

# A renderer takes the listing data (`entity` and `entities`) and
# returns the HTML document.
Renderer = Callable[[Mapping[str, Any]], str]

LISTING_CSS: str = """
:root {
    font-family: sans-serif;
    font-size: 14px;
    line-height: 1.35em;
    padding: 20px;
    background: #F0F0F0;
}
h1 {
margin-top: 1.75em;
margin-bottom: 1.75em;
line-height:1.25em;
}
table {
    border-collapse: collapse;
    min-width: 40em;
}
th, td {
    text-align: left;
    padding: 0.25em 1em 0.25em 0em;
}
td.size, td.time {
    font-variant-numeric: tabular-nums;
    color: #606060;
}
tbody > tr:hover {
    background: #E6E6E6;
}
img.icon {
    width: 16px;
    height: 16px;
    vertical-align: middle;
}
"""


def row(entity: Entity) -> Node:
	name = f"{entity.displayName}/" if entity.isDirectory else entity.displayName
	return H.tr(
		H.td(H.img(src=entity.icon, alt=entity.fileType.value, _="icon")),
		H.td(H.a(name, href=entity.href), _="name"),
		H.td(entity.displaySize, _="size"),
		H.td(entity.displayTime, _="time"),
		_="entity",
	)


def listing(data: Mapping[str, Any]) -> str:
	"""Renders the listing of `data["entity"]`, with one row for each
	of `data["entities"]`."""
	entity: Entity = data["entity"]
	entities: list[Entity] = list(data["entities"])
	parent: str | None = entity.parent
	return "".join(
		html(
			H.html(
				H.head(
					H.meta(charset="utf-8"),
					H.meta(
						name="viewport",
						content="width=device-width, initial-scale=1.0",
					),
					H.title(entity.displayPath),
					H.style(raw(LISTING_CSS)),
				),
				H.body(
					H.h1("Listing for ", entity.displayPath),
					H.p(H.a("..", href=Entity.FromPath(parent).href, _="parent"))
					if parent is not None
					else None,
					H.table(
						H.thead(
							H.tr(H.th(""), H.th("Name"), H.th("Size"), H.th("Modified"))
						),
						H.tbody([row(_) for _ in entities]),
					),
				),
			),
			doctype="html",
		)
	)


# EOF
