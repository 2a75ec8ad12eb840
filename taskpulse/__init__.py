"""TaskPulse core library — derived dashboard state for a personal task tracker.

Public API re-exports for convenient imports:
    from taskpulse import aggregate, greet, motivate, VisibilityController, ...
"""

__version__ = "0.1.0"

# Workspace & config
from taskpulse.workspace import (
    Config,
    workspace_root,
    load_config,
    get_user_timezone,
    now_local,
    today_str,
    user_path,
    config_path,
    log_dir,
)

# File I/O
from taskpulse.fileio import (
    read_yaml,
    write_yaml_atomic,
)

# Models
from taskpulse.models import (
    Task,
    Settings,
    UserState,
    DerivedStats,
)

# Computations
from taskpulse.stats import aggregate, deadline_date, is_due_today, StatsCache
from taskpulse.greeting import greet, greeting_line
from taskpulse.motivation import motivate

# Shared state & visibility
from taskpulse.state import StateSaver, StateStore, with_show_progress_bar
from taskpulse.visibility import (
    Notification,
    NotificationPresenter,
    UndoAction,
    VisibilityController,
)

# Deferred loading
from taskpulse.loader import DeferredLoad, LoadStatus

# Tasks
from taskpulse.tasks import (
    validate_task,
    load_user_state,
    save_user_state,
    find_task,
    create_task,
    update_task,
    set_done,
    toggle_done,
    delete_task,
)

# Dashboard
from taskpulse.dashboard import (
    DashboardView,
    build_dashboard,
    format_list,
    percentage_label,
    count_header,
)

# Logging
from taskpulse.logging_setup import setup_logging
