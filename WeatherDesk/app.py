"""Tkinter window: search box, recent searches, current conditions and forecast."""
import io
import logging
import queue
import tkinter as tk
from concurrent.futures import ThreadPoolExecutor
from tkinter import messagebox, ttk
from typing import Callable, Dict, Optional

import requests
from PIL import Image, ImageTk

from history_manager import HistoryManager
from layout import (
    THEMES,
    choose_theme,
    city_from_history_line,
    format_current_lines,
    format_forecast_card,
    format_history_line,
    format_time,
    get_temperature_color,
    icon_url,
)
from search_runner import SearchRunner
from weather_data import WeatherSnapshot
from weather_errors import describe_error

POLL_INTERVAL_MS = 50
UNIT_CHOICES = {"metric (°C, m/s)": "metric", "imperial (°F, mph)": "imperial"}


def download_icon(icon: str, size: int, timeout: float = 8) -> Optional[Image.Image]:
    """Download an OpenWeatherMap icon and decode it. Runs off the UI thread."""
    url = icon_url(icon)
    if url is None:
        return None
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        image = Image.open(io.BytesIO(response.content))
        image.load()
    except (requests.exceptions.RequestException, OSError) as e:
        logging.warning(f"Could not load icon {icon}: {e}")
        return None
    return image.resize((size, size), Image.LANCZOS)


class WeatherApp(tk.Tk):
    """Main window. All widget access happens on the Tk thread."""

    def __init__(self, runner_factory: Callable[[Callable], SearchRunner], history: HistoryManager, units: str = "metric"):
        super().__init__()
        self.title("Weather Information")
        self.geometry("980x600")
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self.history = history
        self._ui_queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self.runner = runner_factory(self._ui_queue.put)
        self._icon_pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="weather-icons")
        self._icons: Dict[str, ImageTk.PhotoImage] = {}

        default_label = next(label for label, value in UNIT_CHOICES.items() if value == units)
        self.units_var = tk.StringVar(value=default_label)
        self.city_var = tk.StringVar()
        self.status_var = tk.StringVar(value="Ready")

        self._build_ui()
        self.apply_theme(choose_theme())
        self.refresh_history()
        self.after(POLL_INTERVAL_MS, self._drain_queue)

    # ---------- UI builders ----------
    def _build_ui(self) -> None:
        self.style = ttk.Style(self)

        top = ttk.Frame(self, padding=10, style="App.TFrame")
        top.pack(side="top", fill="x")
        ttk.Label(top, text="Location:", style="App.TLabel").pack(side="left")
        self.city_entry = ttk.Entry(top, textvariable=self.city_var, width=40)
        self.city_entry.pack(side="left", padx=6)
        self.city_entry.bind("<Return>", lambda _e: self.do_search())
        ttk.Label(top, text="Units:", style="App.TLabel").pack(side="left")
        ttk.Combobox(
            top, textvariable=self.units_var, values=list(UNIT_CHOICES), state="readonly", width=18
        ).pack(side="left", padx=6)
        self.search_btn = ttk.Button(top, text="Search", command=self.do_search)
        self.search_btn.pack(side="left", padx=6)

        body = ttk.Frame(self, padding=10, style="App.TFrame")
        body.pack(side="top", fill="both", expand=True)

        left = ttk.Frame(body, style="App.TFrame")
        left.pack(side="left", fill="y")
        ttk.Label(left, text="Recent searches", style="App.TLabel").pack(anchor="w")
        self.history_list = tk.Listbox(left, width=30, activestyle="none")
        self.history_list.pack(fill="y", expand=True, pady=4)
        self.history_list.bind("<<ListboxSelect>>", self._on_history_select)

        center = ttk.Frame(body, padding=(12, 0), style="App.TFrame")
        center.pack(side="left", fill="both", expand=True)
        self.current_box = ttk.Frame(center, padding=12, style="Card.TFrame")
        self.current_box.pack(fill="x")
        ttk.Separator(center).pack(fill="x", pady=8)
        ttk.Label(center, text="Short-term forecast", style="App.TLabel").pack(anchor="w")
        self.forecast_box = ttk.Frame(center, padding=8, style="App.TFrame")
        self.forecast_box.pack(fill="x")

        ttk.Label(self, textvariable=self.status_var, padding=6, style="App.TLabel").pack(side="bottom", anchor="w")

    def apply_theme(self, theme: str) -> None:
        colors = THEMES[theme]
        self.configure(background=colors["bg"])
        self.style.configure("App.TFrame", background=colors["bg"])
        self.style.configure("Card.TFrame", background=colors["card"])
        self.style.configure("App.TLabel", background=colors["bg"], foreground=colors["fg"])
        self.style.configure("Card.TLabel", background=colors["card"], foreground=colors["fg"])
        self.history_list.configure(background=colors["card"], foreground=colors["fg"])

    # ---------- search ----------
    def do_search(self) -> None:
        city = self.city_var.get().strip()
        if not city:
            messagebox.showerror("Input error", "Please enter a city name.")
            return
        units = UNIT_CHOICES[self.units_var.get()]
        self.search_btn.state(["disabled"])
        self.status_var.set("Fetching...")
        self._clear(self.current_box)
        self._clear(self.forecast_box)
        self.runner.submit(
            city,
            units,
            on_success=lambda snapshot: self.show_weather(snapshot, units),
            on_error=self.show_error,
        )

    def show_weather(self, snapshot: WeatherSnapshot, units: str) -> None:
        self.apply_theme(choose_theme(snapshot))
        self._render_current(snapshot, units)
        self._render_forecast(snapshot, units)
        self.refresh_history()
        self.status_var.set(f"Updated: {format_time(int(snapshot.timestamp), '%Y-%m-%d %H:%M')}")
        self.search_btn.state(["!disabled"])

    def show_error(self, error: Exception) -> None:
        messagebox.showerror("Fetch error", describe_error(error))
        self.status_var.set("Error")
        self.search_btn.state(["!disabled"])

    # ---------- rendering ----------
    def _render_current(self, snapshot: WeatherSnapshot, units: str) -> None:
        self._clear(self.current_box)
        title, temp_line, humidity_line, wind_line = format_current_lines(snapshot, units)
        header = ttk.Frame(self.current_box, style="Card.TFrame")
        header.pack(anchor="w")
        icon_label = ttk.Label(header, style="Card.TLabel")
        icon_label.pack(side="left")
        self._load_icon(snapshot.icon, 84, icon_label)
        ttk.Label(header, text=title, font=("TkDefaultFont", 16, "bold"), style="Card.TLabel").pack(side="left", padx=8)
        ttk.Label(
            self.current_box, text=temp_line, style="Card.TLabel",
            foreground=get_temperature_color(snapshot.temp, units),
        ).pack(anchor="w")
        ttk.Label(self.current_box, text=humidity_line, style="Card.TLabel").pack(anchor="w")
        ttk.Label(self.current_box, text=wind_line, style="Card.TLabel").pack(anchor="w")

    def _render_forecast(self, snapshot: WeatherSnapshot, units: str) -> None:
        self._clear(self.forecast_box)
        for point in snapshot.forecast:
            when, temp, condition = format_forecast_card(point, units)
            card = ttk.Frame(self.forecast_box, padding=8, style="Card.TFrame")
            card.pack(side="left", padx=5)
            ttk.Label(card, text=when, font=("TkDefaultFont", 10, "bold"), style="Card.TLabel").pack()
            icon_label = ttk.Label(card, style="Card.TLabel")
            icon_label.pack()
            self._load_icon(point.icon, 60, icon_label)
            ttk.Label(card, text=temp, style="Card.TLabel").pack()
            ttk.Label(card, text=condition, style="Card.TLabel").pack()

    def _load_icon(self, icon: str, size: int, target: ttk.Label) -> None:
        key = f"{icon}@{size}"
        if key in self._icons:
            target.configure(image=self._icons[key])
            return
        if icon_url(icon) is None:
            return

        def fetch() -> None:
            image = download_icon(icon, size)
            if image is not None:
                self._ui_queue.put(lambda: self._set_icon(key, image, target))

        self._icon_pool.submit(fetch)

    def _set_icon(self, key: str, image: Image.Image, target: ttk.Label) -> None:
        photo = self._icons.setdefault(key, ImageTk.PhotoImage(image))
        if target.winfo_exists():
            target.configure(image=photo)

    # ---------- history ----------
    def refresh_history(self) -> None:
        self.history_list.delete(0, tk.END)
        for item in self.history.load():
            self.history_list.insert(tk.END, format_history_line(item))

    def _on_history_select(self, _event) -> None:
        selection = self.history_list.curselection()
        if not selection:
            return
        city = city_from_history_line(self.history_list.get(selection[0]))
        if city:
            self.city_var.set(city)
            self.do_search()

    # ---------- plumbing ----------
    def _drain_queue(self) -> None:
        while True:
            try:
                callback = self._ui_queue.get_nowait()
            except queue.Empty:
                break
            callback()
        self.after(POLL_INTERVAL_MS, self._drain_queue)

    @staticmethod
    def _clear(frame: tk.Widget) -> None:
        for child in frame.winfo_children():
            child.destroy()

    def _on_close(self) -> None:
        logging.info("Window closed, shutting down workers")
        self.runner.shutdown()
        self._icon_pool.shutdown(wait=False, cancel_futures=True)
        self.destroy()
