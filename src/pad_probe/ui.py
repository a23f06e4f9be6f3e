from typing import Literal, Optional, Sequence

from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from pad_probe.codec import bytes_to_hex, hex_to_ascii
from pad_probe.engine import BlockResult
from pad_probe.progress import SingleSlotQueue
from pad_probe.state_snapshot import StateSnapshot


COLORS = {
    "current_byte": "bold yellow on black",
    "ciphertext": {
        "unsolved": "dark_red",
        "solved": "bright_red",
    },
    "intermediate": {
        "unsolved": "cyan",
        "solved": "turquoise2",
    },
    "plaintext": {
        "unsolved": "green",
        "solved": "spring_green2",
    },
}

BlockType = Literal["ciphertext", "intermediate", "plaintext"]


def block_to_string(block: Sequence[Optional[int]], block_type: BlockType, current_byte_index: int = -1) -> str:
    """Convert a block to a spaced hex string, coloring bytes before, at and after the current index."""
    styles = COLORS[block_type]
    hex_bytes = []
    for i, b in enumerate(block):
        text = "??" if b is None else f"{b:02x}"
        if i == current_byte_index:
            style = COLORS["current_byte"]
        elif i < current_byte_index or b is None:
            style = styles["unsolved"]
        else:
            style = styles["solved"]
        hex_bytes.append(f"[{style}]{text}[/{style}]")
    return " ".join(hex_bytes)


def render(state: Optional[StateSnapshot]):
    """Render the attack state snapshot."""
    if state is None:
        return Panel("Waiting for first oracle query…", title="Padding Oracle", border_style="dim")

    current = -1 if state.complete else state.byte_index_i
    status = "done" if state.complete else f"Position {state.pad_length_k} / {state.block_size}  |  Guess {state.byte_value_g:02x}"

    ui_table = Table(title=f"{status}  |  Queries {state.tries}  |  v{state.state_version}")
    ui_table.add_column("", justify="right")
    ui_table.add_column("Bytes")
    ui_table.add_row("Forged Cₙ₋₁′", block_to_string(state.ciphertext_prime, "ciphertext", current))
    ui_table.add_row("Intermediate Iₙ", block_to_string(state.intermediate, "intermediate", current))
    ui_table.add_row("Plaintext Pₙ", block_to_string(state.plaintext, "plaintext", current))
    return ui_table


def ui_loop(state_queue: SingleSlotQueue[StateSnapshot]) -> None:
    """Redraw until the queue is closed."""
    with Live(render(None), refresh_per_second=30, screen=False) as live:
        while True:
            state = state_queue.get()
            if state is None:
                break
            live.update(render(state))


def render_result(result: BlockResult) -> Panel:
    """Final result panel: intermediate state and, when known, the plaintext."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="cyan", no_wrap=True)
    grid.add_column()
    grid.add_row("Intermediate (HEX)", result.intermediate_hex)
    if result.plaintext_padded is not None and result.plaintext is not None:
        grid.add_row("Plain Text (HEX)", bytes_to_hex(result.plaintext_padded))
        grid.add_row("Padding Length", f"{result.padding_length} byte")
        grid.add_row("Plain Text (ASCII)", repr(hex_to_ascii(bytes_to_hex(result.plaintext))))
    grid.add_row("Oracle Queries", str(result.stats.tries))
    return Panel(grid, title="Result", padding=(1, 1))
