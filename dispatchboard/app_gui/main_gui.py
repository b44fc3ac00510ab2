import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from pathlib import Path
from typing import Any, Callable

from dispatchboard.config import BoardSettings, load_settings
from dispatchboard.core.errors import AlertPlaybackError, DispatchBoardError
from dispatchboard.core.logger import get_logger
from dispatchboard.core.poller import BoardSnapshot, DispatchPoller
from dispatchboard.services.alerts import AlertTrigger
from dispatchboard_persist.stores.base_store import StoreError


COLUMNS = (
    ("time", "時間", 70),
    ("type", "類型", 80),
    ("car_number", "車號", 90),
    ("driver_name", "駕駛", 90),
    ("driver_phone", "電話", 120),
    ("flight_number", "航班", 80),
    ("address", "地址", 260),
    ("passengers", "乘客", 50),
    ("luggage", "行李", 50),
    ("status", "狀態", 80),
)

ROW_COLORS = {
    "success": "#a5d6a7",
    "error": "#ef9a9a",
    "warning": "#ffe082",
    "none": "white",
}


class TkScheduler:
    """Scheduler adapter over ``Misc.after``."""

    def __init__(self, widget: tk.Misc):
        self.widget = widget

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        return self.widget.after(delay_ms, callback)

    def cancel(self, handle: Any) -> None:
        self.widget.after_cancel(handle)


class TkBellPlayer:
    """Rings the Tk display bell on a loop scheduled with ``after``."""

    def __init__(self, widget: tk.Misc, interval_ms: int = 1000):
        self.widget = widget
        self.interval_ms = interval_ms
        self.position = 0
        self._job: str | None = None

    @property
    def playing(self) -> bool:
        return self._job is not None

    def play(self) -> None:
        if self._job is not None:
            return
        try:
            self._ring()
        except tk.TclError as exc:
            self._job = None
            raise AlertPlaybackError(f"Tk bell unavailable: {exc}") from exc

    def _ring(self) -> None:
        self.widget.bell()
        self.position += 1
        self._job = self.widget.after(self.interval_ms, self._ring)

    def pause(self) -> None:
        if self._job is not None:
            self.widget.after_cancel(self._job)
            self._job = None

    def rewind(self) -> None:
        self.position = 0


class App(tk.Tk):
    def __init__(self, settings: BoardSettings | None = None):
        super().__init__()
        self.title("派車確認系統")
        self.geometry("1100x600")

        self.settings = settings or load_settings()
        self.logger = get_logger(self.settings.root / "logs")
        self.store = self.settings.open_store()
        self.trigger = AlertTrigger(TkBellPlayer(self, self.settings.bell_interval_ms))
        self.poller = DispatchPoller(
            self.store,
            self.trigger,
            interval_ms=self.settings.poll_interval_ms,
            approaching_seconds=self.settings.approaching_seconds,
        )

        self.var_clock = tk.StringVar(value="")
        self.var_info = tk.StringVar(value="")
        self._build_ui()

        self.poller.add_listener(self._render)
        self.poller.start(TkScheduler(self))
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def _build_ui(self):
        frm_top = ttk.Frame(self)
        frm_top.pack(fill=tk.X, padx=10, pady=10)

        ttk.Button(frm_top, text="上傳派車資料", command=self._on_upload).pack(side=tk.LEFT)
        self.btn_sound = ttk.Button(frm_top, text="🔇 啟用警告音", command=self._on_enable_sound)
        self.btn_sound.pack(side=tk.LEFT, padx=(8, 0))
        self.btn_confirm = ttk.Button(frm_top, text="確認", command=self._on_confirm)
        self.btn_confirm.pack(side=tk.LEFT, padx=(8, 0))
        ttk.Label(frm_top, textvariable=self.var_clock, font=("Courier", 14)).pack(side=tk.RIGHT)

        frm_table = ttk.Frame(self)
        frm_table.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))
        self.tree = ttk.Treeview(
            frm_table, columns=[key for key, _, _ in COLUMNS], show="headings", selectmode="browse"
        )
        for key, heading, width in COLUMNS:
            self.tree.heading(key, text=heading)
            self.tree.column(key, width=width, anchor=tk.W)
        for urgency, color in ROW_COLORS.items():
            self.tree.tag_configure(urgency, background=color)
        scroll = ttk.Scrollbar(frm_table, orient=tk.VERTICAL, command=self.tree.yview)
        self.tree.configure(yscrollcommand=scroll.set)
        self.tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)
        self.tree.bind("<Double-1>", lambda _event: self._on_confirm())

        ttk.Label(self, textvariable=self.var_info).pack(fill=tk.X, padx=10, pady=(0, 10))

    def _render(self, snapshot: BoardSnapshot):
        self.var_clock.set(f"現在時間：{snapshot.now.strftime('%Y-%m-%d %H:%M:%S')}")
        self.var_info.set("" if snapshot.rows else "請上傳派車資料檔案")

        items = self.tree.get_children()
        if len(items) != len(snapshot.rows):
            self.tree.delete(*items)
            items = tuple(
                self.tree.insert("", tk.END, iid=str(idx)) for idx in range(len(snapshot.rows))
            )
        for iid, row in zip(items, snapshot.rows):
            record = row.record
            values = (
                record.time,
                record.type,
                record.car_number,
                record.driver_name,
                record.driver_phone,
                record.flight_number,
                record.address,
                record.passengers,
                record.luggage,
                row.view.display,
            )
            self.tree.item(iid, values=values, tags=(row.view.urgency,))

    def _on_upload(self):
        selected = filedialog.askopenfilename(
            title="選擇派車資料",
            filetypes=[("Excel", "*.xlsx *.xls"), ("CSV", "*.csv")],
        )
        if not selected:
            return
        try:
            self.store.load_file(Path(selected))
        except (DispatchBoardError, StoreError, FileNotFoundError) as exc:
            self.logger.error("Upload failed for %s: %s", selected, exc)
            messagebox.showerror("上傳失敗", str(exc))
            return
        self.poller.tick()

    def _on_confirm(self):
        selection = self.tree.selection()
        if not selection:
            return
        record = self.store.records[int(selection[0])]
        if record.is_confirmed:
            return
        try:
            self.store.confirm(record.id)
        except StoreError as exc:
            self.logger.error("Confirm failed for %s: %s", record.id, exc)
            messagebox.showerror("確認失敗", str(exc))
            return
        self.poller.tick()

    def _on_enable_sound(self):
        if self.trigger.enable_sound():
            self.btn_sound.pack_forget()

    def _on_close(self):
        self.poller.stop()
        self.destroy()


def main(settings: BoardSettings | None = None):
    app = App(settings)
    app.mainloop()


if __name__ == "__main__":
    main()
