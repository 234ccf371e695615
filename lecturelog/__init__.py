"""lecturelog: markdown outlines to timed lecture checklists."""
