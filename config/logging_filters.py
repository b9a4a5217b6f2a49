class ExamContextFilter:
    """
    Adds exam-session context to log records.
    Missing fields are filled with '-'.
    """

    STATUS_COLORS = {
        "graded": "\x1b[32m",  # green
        "submitted": "\x1b[33m",  # yellow
        "in-progress": "\x1b[36m",  # cyan
    }

    def filter(self, record):
        if not hasattr(record, "session_id"):
            record.session_id = "-"
        if not hasattr(record, "student_id"):
            record.student_id = "-"
        if not hasattr(record, "exam_id"):
            record.exam_id = "-"
        if not hasattr(record, "status"):
            record.status = "-"
        record.status_color = self.STATUS_COLORS.get(str(record.status), "")
        return True
