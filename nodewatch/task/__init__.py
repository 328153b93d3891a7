"""Host task plugin: round task, submission, and the namespace interface."""
