"""
Renders a ``PanelView`` to the terminal with rich.
"""

from typing import List, Optional

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from typing_extensions import assert_never

from .localization import Localizer
from .schemas import (
    EmailResult,
    FindingStatus,
    MetadataResult,
    NetworkResult,
    ReliabilityLevel,
    ReliabilityReview,
    WhoisResult,
)
from .views import PanelView, PrimaryView, ReviewView

_LEVEL_STYLES = {
    ReliabilityLevel.HIGH: "bold green",
    ReliabilityLevel.MEDIUM: "bold yellow",
    ReliabilityLevel.LOW: "bold red",
}

_STATUS_MARKERS = {
    FindingStatus.POSITIVE: "[green]✔[/green]",
    FindingStatus.NEGATIVE: "[red]✘[/red]",
    FindingStatus.WARNING: "[yellow]![/yellow]",
}


def _rows(title: str, rows: List[tuple]) -> Table:
    table = Table(title=title, show_header=False, expand=True)
    table.add_column(style="cyan", no_wrap=True)
    table.add_column()
    for label, value in rows:
        table.add_row(label, value if value not in (None, "") else "-")
    return table


def _joined(values: List[str]) -> str:
    return "\n".join(values) if values else "-"


def render_whois(result: WhoisResult, t: Localizer) -> RenderableType:
    data = result.data
    rows = [
        (t.text("whois.domainName"), data.domain_name),
        (t.text("whois.registrar"), data.registrar),
        (t.text("whois.creationDate"), data.creation_date),
        (t.text("whois.expiryDate"), data.expiry_date),
        (t.text("whois.updatedDate"), data.updated_date),
        (t.text("whois.nameServers"), _joined(data.name_servers)),
    ]
    if data.registrant:
        rows.append((t.text("whois.registrantName"), data.registrant.name))
        rows.append((t.text("whois.organization"), data.registrant.organization))
    return _rows(t.text("whois.title"), rows)


def render_network(result: NetworkResult, t: Localizer) -> RenderableType:
    data = result.data
    overview = _rows(
        t.text("nay.title"),
        [
            (t.text("nay.target"), data.target),
            (t.text("nay.location"), f"{data.location.city}, {data.location.country}"),
            (t.text("nay.provider"), data.hosting.provider),
            (t.text("nay.asn"), data.hosting.asn),
            (t.text("nay.technologies"), ", ".join(data.technologies) or "-"),
        ],
    )

    ports = Table(title=t.text("nay.openPorts"), expand=True)
    ports.add_column(t.text("nay.port"), justify="right")
    ports.add_column(t.text("nay.service"))
    for open_port in data.open_ports:
        ports.add_row(str(open_port.port), open_port.service)

    cert = data.ssl_certificate
    if cert is None:
        ssl: RenderableType = Panel(t.text("nay.noSsl"), title=t.text("nay.sslCertificate"))
    else:
        ssl = _rows(
            t.text("nay.sslCertificate"),
            [
                (t.text("nay.issuer"), cert.issuer),
                (t.text("nay.subject"), cert.subject),
                (t.text("nay.validFrom"), cert.valid_from),
                (t.text("nay.validTo"), cert.valid_to),
            ],
        )

    dns = _rows(
        t.text("nay.dnsRecords"),
        [
            ("A", _joined(data.dns_records.a)),
            ("AAAA", _joined(data.dns_records.aaaa)),
            ("MX", _joined(data.dns_records.mx)),
        ],
    )
    return Group(overview, ports, ssl, dns)


def render_email(result: EmailResult, t: Localizer) -> RenderableType:
    data = result.data
    yes, no = t.text("common.yes"), t.text("common.no")
    overview = _rows(
        t.text("email.title"),
        [
            (t.text("email.email"), data.email),
            (t.text("email.isValidSyntax"), yes if data.is_valid_syntax else no),
            (t.text("email.domain"), data.domain),
            (t.text("email.hasMxRecords"), yes if data.has_mx_records else no),
        ],
    )
    breaches = _rows(
        t.text("email.breaches"),
        [(b.source, b.date) for b in data.breaches]
        if data.breaches
        else [(t.text("email.noBreaches"), "")],
    )
    profiles = _rows(
        t.text("email.socialProfiles"),
        [(p.platform, p.url) for p in data.social_profiles]
        if data.social_profiles
        else [(t.text("email.noProfiles"), "")],
    )
    return Group(overview, breaches, profiles)


def render_metadata(result: MetadataResult, t: Localizer) -> RenderableType:
    data = result.data
    file_info = _rows(
        t.text("beda.title"),
        [
            (t.text("beda.fileName"), data.file_name),
            (t.text("beda.fileSize"), data.file_size),
        ]
        + [(name, tag.description) for name, tag in data.image.items()],
    )
    exif = _rows(
        t.text("beda.exifData"),
        [(name, tag.description) for name, tag in data.exif.items()]
        or [(t.text("beda.noExif"), "")],
    )
    gps = data.gps
    if gps is not None and gps.has_coordinates:
        location: RenderableType = _rows(
            t.text("beda.gpsData"),
            [
                (t.text("beda.latitude"), f"{gps.latitude:.6f}"),
                (t.text("beda.longitude"), f"{gps.longitude:.6f}"),
            ],
        )
    else:
        location = Panel(t.text("beda.noGps"), title=t.text("beda.gpsData"))
    return Group(file_info, exif, location)


def render_review(review: ReliabilityReview, t: Localizer) -> RenderableType:
    levels = t.lookup("fira.reliabilityLevels")
    level = review.reliability.value
    if isinstance(levels, dict):
        level = levels.get(level, level)
    style = _LEVEL_STYLES[review.reliability]
    findings = Table(title=t.text("fira.findings"), show_header=False, expand=True)
    findings.add_column(width=2)
    findings.add_column()
    for finding in review.findings:
        findings.add_row(_STATUS_MARKERS[finding.status], finding.description)
    summary = _rows(
        t.text("fira.title"),
        [
            (t.text("fira.reliability"), f"[{style}]{level}[/{style}]"),
            (t.text("fira.summary"), review.summary),
        ],
    )
    return Group(summary, findings)


def _error_panel(message: Optional[str], title: str) -> Panel:
    return Panel(f"[bold red]{message}[/]", title=title, border_style="red")


def render_result(view: PanelView, t: Localizer) -> Optional[RenderableType]:
    result = view.result
    if result is None:
        return None
    if isinstance(result, WhoisResult):
        return render_whois(result, t)
    if isinstance(result, NetworkResult):
        return render_network(result, t)
    if isinstance(result, EmailResult):
        return render_email(result, t)
    if isinstance(result, MetadataResult):
        return render_metadata(result, t)
    assert_never(result)


def render_panel(view: PanelView, t: Localizer, console: Console) -> None:
    """Prints the primary result and, when present, the reliability stage."""
    if view.upload_error:
        console.print(_error_panel(view.upload_error, t.text("errors.title")))

    if view.primary is PrimaryView.LOADING:
        console.print(f"[cyan]{t.text('loading')}[/cyan]")
    elif view.primary is PrimaryView.ERROR:
        console.print(_error_panel(view.error, t.text("errors.title")))
    elif view.primary is PrimaryView.RESULT:
        console.print(render_result(view, t))
    else:
        console.print(t.text("emptyState"))

    if view.secondary is ReviewView.REVIEW and view.review is not None:
        console.print(render_review(view.review, t))
    elif view.secondary is ReviewView.ERROR:
        console.print(_error_panel(view.review_error, t.text("fira.title")))
    elif view.secondary is ReviewView.LOADING:
        console.print(f"[cyan]{t.text('fira.loading')}[/cyan]")
    elif view.secondary is ReviewView.OFFER:
        console.print(f"[dim]{t.text('fira.offer')}[/dim]")
