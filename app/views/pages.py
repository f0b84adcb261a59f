import json
from typing import Any
from urllib.parse import quote

from htpy import Node, a, body, div, h1, h2, head, html, meta, p, span, table, td, th, title, tr

from app.views.polling import RenderMode, poll_marker


def _queue_href(name: Any) -> str:
    return f"/queues/{quote(str(name), safe='')}"


def _args(args: Any) -> str:
    if args is None:
        return ""
    return json.dumps(args)


def _job_cell(worker: dict[str, Any]) -> Node:
    job = worker.get("job") or {}
    payload = job.get("payload") or {}
    if not job:
        return td(class_="idle")["Waiting for a job..."]
    return td(class_="process")[
        a(href=_queue_href(job.get("queue", "")))[job.get("queue", "")],
        " ",
        payload.get("class", ""),
        " since ",
        job.get("run_at", ""),
    ]


def _queues_table(queues: list[dict[str, Any]], failed: int) -> Node:
    return table(class_="queues")[
        tr[th["Name"], th["Jobs"]],
        (
            tr[td(class_="queue")[a(href=_queue_href(q["name"]))[q["name"]]], td(class_="size")[str(q["size"])]]
            for q in queues
        ),
        tr(class_="failed" if failed else "failure")[
            td(class_="queue failed")[a(href="/failed")["failed"]],
            td(class_="size")[str(failed)],
        ],
    ]


def _working_table(workers: list[dict[str, Any]], total: int) -> Node:
    return div(class_="working")[
        h2[f"{len(workers)} of {total} Workers Working"],
        table(class_="workers")[
            tr[th["Where"], th["Queue"], th["Processing"]],
            (
                tr[
                    td(class_="where")[a(href=f"/workers/{quote(w['id'], safe='')}")[w["host"], ":", w["pid"]]],
                    td(class_="queues")[", ".join(w["queues"])],
                    _job_cell(w),
                ]
                for w in workers
            ),
            () if workers else tr[td(colspan="3", class_="no-data")["Nothing is happening right now..."]],
        ],
    ]


def render_overview(data: dict[str, Any], mode: RenderMode) -> Node:
    return div(id="overview")[
        h1["Queues"],
        p(class_="sub")["The list below contains all the registered queues with the number of jobs currently in the queue."],
        _queues_table(data["queues"], data["failed"]),
        _working_table(data["working"], data["workers"]),
        poll_marker(mode),
    ]


def render_workers(data: dict[str, Any], mode: RenderMode) -> Node:
    hosts: dict[str, list[str]] = data.get("hosts") or {}
    if "worker" in data:
        w = data["worker"]
        body_ = [
            h1[f"Worker {w['id']}"],
            table(class_="worker")[
                tr[th["Host"], th["Pid"], th["Started"], th["Queues"], th["Processed"], th["Failed"], th["Processing"]],
                tr[
                    td[w["host"]],
                    td[w["pid"]],
                    td[w.get("started") or ""],
                    td[", ".join(w["queues"])],
                    td[str(w["processed"])],
                    td[str(w["failed"])],
                    _job_cell(w),
                ],
            ],
        ]
    elif data.get("workers") or "host" in data:
        heading = f"Workers on {data['host']}" if "host" in data else f"{data['total']} Workers"
        body_ = [
            h1[heading],
            table(class_="workers")[
                tr[th["Where"], th["Queues"], th["Processing"]],
                (
                    tr[
                        td(class_="where")[a(href=f"/workers/{quote(w['id'], safe='')}")[w["host"], ":", w["pid"]]],
                        td(class_="queues")[", ".join(w["queues"])],
                        _job_cell(w),
                    ]
                    for w in data["workers"]
                ),
            ],
        ]
    else:
        body_ = [
            h1["Worker Hosts"],
            table(class_="workers")[
                tr[th["Hostname"], th["Workers"]],
                (
                    tr[td[a(href=f"/workers/{quote(host, safe='')}")[host]], td[str(len(ids))]]
                    for host, ids in hosts.items()
                ),
                tr[td[a(href="/workers/all")["all workers"]], td[str(data.get("total", 0))]],
            ],
        ]
    return div(id="workers")[body_, poll_marker(mode)]


def render_working(data: dict[str, Any], mode: RenderMode) -> Node:
    return div(id="working")[_working_table(data["working"], data["total"])]


def render_queues(data: dict[str, Any], mode: RenderMode) -> Node:
    return div(id="queues")[
        h1["Queues"],
        _queues_table(data["queues"], data["failed"]),
    ]


def render_queue(data: dict[str, Any], mode: RenderMode) -> Node:
    jobs = data["jobs"]
    first = data["start"] + 1 if jobs else data["start"]
    return div(id="queue")[
        h1["Pending jobs on ", span(class_="hl")[data["name"]]],
        p(class_="sub")[f"Showing {first} to {data['start'] + len(jobs)} of {data['size']} jobs"],
        table(class_="jobs")[
            tr[th["Class"], th["Args"]],
            (tr[td(class_="class")[job.get("class") or ""], td(class_="args")[_args(job.get("args"))]] for job in jobs),
            () if jobs else tr[td(colspan="2", class_="no-data")["There are no pending jobs in this queue"]],
        ],
    ]


def render_failed(data: dict[str, Any], mode: RenderMode) -> Node:
    page = data["page"]
    failures = page["items"]
    return div(id="failed")[
        h1["Failed Jobs"],
        table(class_="queues")[
            tr[th["Queue"], th["Failures"]],
            (tr[td(class_="queue")[queue], td(class_="size")[str(count)]] for queue, count in data["queues"]),
        ],
        p(class_="sub")[f"Showing {len(failures)} of {page['total']} failed jobs"],
        table(class_="failed")[
            tr[th["#"], th["Queue"], th["Class"], th["Exception"], th["Error"], th["Failed At"], th["Retried At"]],
            (
                tr[
                    td[str(f["index"])],
                    td[f["queue"]],
                    td[(f["payload"] or {}).get("class") or ""],
                    td(class_="exception")[f["exception"]],
                    td(class_="error")[f["error"]],
                    td[f.get("failed_at") or ""],
                    td[f.get("retried_at") or ""],
                ]
                for f in failures
            ),
            () if failures else tr[td(colspan="7", class_="no-data")["Nothing has failed"]],
        ],
    ]


def render_stats(data: dict[str, Any], mode: RenderMode) -> Node:
    stats = data["stats"]
    return div(id="stats")[
        h1[data["id"]],
        table(class_="stats")[
            (
                tr[th[name], td[", ".join(value) if isinstance(value, list) else str(value)]]
                for name, value in stats.items()
            )
        ],
    ]


def render_error(message: str) -> Node:
    return html(lang="en")[
        head[meta(charset="utf-8"), title["Error"]],
        body[div(class_="error")[h1["Error"], p[message]]],
    ]
