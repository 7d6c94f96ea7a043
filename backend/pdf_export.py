import re
from datetime import date
from io import BytesIO
from urllib.parse import quote

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from config import MAX_PDF_COPIES

MARGIN = 50


def clamp_copies(copies):
    try:
        copies = int(copies)
    except (TypeError, ValueError):
        copies = 1
    return min(max(copies, 1), MAX_PDF_COPIES)


def content_disposition(room_name):
    """Attachment header for a room's chart, safe for any room name.

    ``filename`` carries an ASCII-only fallback, ``filename*`` the real name
    percent-encoded as UTF-8.
    """
    filename = f"room-allocation-{room_name}.pdf"
    fallback = re.sub(r"[^A-Za-z0-9._-]+", "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _seat_map(room):
    return {(a.row_no, a.col_no, a.bench_position): a for a in room.student_assignments}


def _fit(c, y, needed):
    """Start a new page when ``needed`` points no longer fit above the margin."""
    if y - needed < MARGIN:
        c.showPage()
        return A4[1] - MARGIN
    return y


def _draw_list(c, y, title, lines):
    y = _fit(c, y, 35)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN, y, title)
    y -= 20
    for line in lines:
        y = _fit(c, y, 15)
        c.setFont("Helvetica", 12)
        c.drawString(MARGIN + 10, y, f"- {line}")
        y -= 15
    return y - 10


def _draw_chart(c, room):
    width, height = A4
    y = height - MARGIN

    c.setFont("Helvetica-Bold", 18)
    c.drawString(MARGIN, y, room.school.name)
    y -= 25
    c.setFont("Helvetica-Bold", 16)
    c.drawString(MARGIN, y, f"Room Allocation: {room.room_name}")
    y -= 20
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN, y, f"Generated: {date.today().isoformat()}")
    y -= 30

    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN, y, "Room Details")
    y -= 20
    c.setFont("Helvetica", 12)
    for line in (
        f"Rows: {room.rows}",
        f"Columns: {room.columns}",
        f"Students per Bench: {room.students_per_bench}",
        f"Total Capacity: {room.rows * room.columns * room.students_per_bench}",
    ):
        c.drawString(MARGIN, y, line)
        y -= 15
    y -= 10

    if room.class_rooms:
        y = _draw_list(
            c, y, "Classes in Room",
            [cr.klass.name + (f" - {cr.klass.section}" if cr.klass.section else "") for cr in room.class_rooms],
        )

    if room.teacher_assignments:
        y = _draw_list(c, y, "Teachers", [ta.teacher.name or "N/A" for ta in room.teacher_assignments])

    y = _fit(c, y, 45)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(MARGIN, y, "Seating Chart")
    y -= 25

    cell_width = min(80, (width - 2 * MARGIN) / room.columns)
    cell_height = min(30, max(12, (y - MARGIN) / room.rows))
    if y - room.rows * cell_height < MARGIN / 2:
        c.showPage()
        y = height - MARGIN

    start_x, start_y = MARGIN, y

    c.setStrokeColorRGB(0.5, 0.5, 0.5)
    c.setLineWidth(0.5)
    for row in range(room.rows + 1):
        y_pos = start_y - row * cell_height
        c.line(start_x, y_pos, start_x + room.columns * cell_width, y_pos)
    for col in range(room.columns + 1):
        x_pos = start_x + col * cell_width
        c.line(x_pos, start_y, x_pos, start_y - room.rows * cell_height)

    c.setFont("Helvetica", 8)
    for row in range(1, room.rows + 1):
        c.drawString(start_x - 20, start_y - row * cell_height + 4, f"R{row}")
    for col in range(1, room.columns + 1):
        c.drawString(start_x + (col - 1) * cell_width + 2, start_y + 5, f"C{col}")

    seats = _seat_map(room)
    for row in range(1, room.rows + 1):
        for col in range(1, room.columns + 1):
            x_pos = start_x + (col - 1) * cell_width + 3
            y_pos = start_y - (row - 1) * cell_height - 10

            if room.students_per_bench == 1:
                assignment = seats.get((row, col, 1))
                if assignment:
                    student = assignment.student
                    c.setFont("Helvetica", 8)
                    c.drawString(x_pos, y_pos, (student.stu_name or "N/A")[:12])
                    if student.klass:
                        c.setFont("Helvetica", 7)
                        c.drawString(x_pos, y_pos - 10, student.klass.name[:10])
            else:
                c.setFont("Helvetica", 7)
                for offset, bench_position in enumerate((1, 2)):
                    assignment = seats.get((row, col, bench_position))
                    if assignment:
                        c.drawString(x_pos, y_pos - offset * 10, (assignment.student.stu_name or "N/A")[:10])


def render_seating_chart(room, copies=1):
    """Return the room's seating chart as PDF bytes, one chart per copy."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)

    for _ in range(clamp_copies(copies)):
        _draw_chart(c, room)
        c.showPage()

    c.save()
    return buffer.getvalue()
