"""Rules for the administrator-maintained client and task lists."""

CLIENTS_TABLE = "clientes"
TASKS_TABLE = "tareas"


def normalize_name(name):
    return (name or "").strip()


# Returns the trimmed name if it should be submitted, or None when the add is a silent no-op (blank or
# already in the list).
def should_add(name, current):
    name = normalize_name(name)
    if not name or name in current:
        return None
    return name
