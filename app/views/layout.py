from htpy import Node, a, body, div, h1, head, header, html, li, main, meta, title, ul

TABS = ["Overview", "Working", "Failed", "Queues", "Workers", "Stats"]


def render_tabs(current: str) -> Node:
    return ul(class_="nav")[
        (
            li(class_="current" if current.lstrip("/").startswith(tab.lower()) else None)[
                a(href=f"/{tab.lower()}")[tab]
            ]
            for tab in TABS
        )
    ]


def render_page(*, title_text: str, current: str, content: Node) -> Node:
    return html(lang="en")[
        head[
            meta(charset="utf-8"),
            title[title_text],
            meta(name="viewport", content="width=device-width, initial-scale=1"),
        ],
        body[
            header(class_="header")[
                h1["Job Queue"],
                render_tabs(current),
            ],
            main(id="main")[div(class_="content")[content]],
        ],
    ]
