"""
Application stylesheet for light and dark mode theming.
"""


def get_application_stylesheet(is_dark: bool) -> str:
    """Return the QSS stylesheet applied once on the QApplication.

    Every window, dialog and the chat widget inherit the theme from it.
    """
    # --- Palette definition (Lavender & Charcoal) ---
    accent = "#B39DFF" if is_dark else "#6D4FC2"
    accent_hover = "#A08AF0" if is_dark else "#5E42AD"
    accent_subtle = "rgba(179, 157, 255, 0.15)" if is_dark else "rgba(109, 79, 194, 0.12)"
    on_accent = "#1A1A1E" if is_dark else "#FFFFFF"
    danger_red = "#E57373" if is_dark else "#C62828"
    success_green = "#81C784" if is_dark else "#388E3C"
    bg_window = "#1A1A1E" if is_dark else "#F8F9FA"
    bg_widget = "#252529" if is_dark else "#FFFFFF"
    secondary_bg = "#3A3A3C" if is_dark else "#EEEEF0"
    text_main = "#E1E1E6" if is_dark else "#333333"
    text_sec = "#8E8E93" if is_dark else "#636366"
    border = "#2C2C2C" if is_dark else "#E0E0E0"
    disabled_bg = "#3A3A3C" if is_dark else "#E5E5EA"
    disabled_text = "#636366" if is_dark else "#8E8E93"

    return f"""
        /* ========== Global Defaults ========== */
        QWidget {{
            background-color: {bg_window};
            color: {text_main};
            font-size: 13px;
        }}

        QLabel {{
            background-color: transparent;
        }}

        QLabel#secondary_label {{
            color: {text_sec};
            font-size: 11px;
        }}

        QLabel#error_label {{
            color: {danger_red};
        }}

        QLabel#success_label {{
            color: {success_green};
        }}

        /* ========== Inputs ========== */
        QLineEdit, QTextEdit {{
            background-color: {bg_widget};
            color: {text_main};
            border: 1px solid {border};
            border-radius: 6px;
            padding: 6px;
            selection-background-color: {accent};
            selection-color: {on_accent};
        }}
        QLineEdit:focus, QTextEdit:focus {{
            border-color: {accent};
        }}

        QProgressBar {{
            background-color: {secondary_bg};
            border: none;
            border-radius: 3px;
            max-height: 6px;
        }}
        QProgressBar::chunk {{
            background-color: {accent};
            border-radius: 3px;
        }}

        /* ========== Buttons ========== */
        QPushButton {{
            background-color: {secondary_bg};
            color: {text_main};
            border: 1px solid {border};
            border-radius: 6px;
            padding: 6px 14px;
        }}
        QPushButton[class="primary"], QPushButton#chat_launcher,
        QPushButton#chat_send_btn {{
            background-color: {accent};
            color: {on_accent};
            border: none;
        }}
        QPushButton[class="primary"]:hover, QPushButton#chat_launcher:hover,
        QPushButton#chat_send_btn:hover {{
            background-color: {accent_hover};
        }}
        QPushButton:disabled {{
            background-color: {disabled_bg};
            color: {disabled_text};
        }}
        QPushButton#chat_launcher {{
            border-radius: 28px;
            padding: 0;
        }}
        QPushButton#chat_header_btn {{
            background: transparent;
            border: none;
            padding: 4px;
        }}
        QPushButton#chat_header_btn:hover {{
            background: {accent_subtle};
            border-radius: 4px;
        }}

        /* ========== Chat Panel ========== */
        QFrame#chat_panel {{
            background-color: {bg_widget};
            border: 1px solid {accent_subtle};
            border-radius: 10px;
        }}
        QFrame#chat_header {{
            background-color: {accent_subtle};
            border: none;
            border-bottom: 1px solid {accent_subtle};
        }}
        QLabel#chat_title {{
            color: {accent};
            font-weight: 600;
        }}
        QScrollArea#chat_scroll_area, QWidget#chat_history_container {{
            background-color: {bg_widget};
            border: none;
        }}
        QFrame#chat_bubble_user {{
            background-color: {accent_subtle};
            border: none;
            border-radius: 8px;
            margin-left: 40px;
        }}
        QFrame#chat_bubble_assistant {{
            background-color: {secondary_bg};
            border: none;
            border-radius: 8px;
            margin-right: 40px;
        }}
        QLabel#chat_role_label {{
            color: {text_sec};
            font-size: 11px;
        }}
        QLabel#chat_loading_label {{
            color: {text_sec};
            font-style: italic;
            padding: 4px 0;
        }}
        QFrame#chat_input_frame {{
            background-color: {bg_widget};
            border: none;
            border-top: 1px solid {accent_subtle};
        }}
    """
