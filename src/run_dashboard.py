"""
Dashboard Launcher for White Mousse Sales Intelligence
=======================================================

Simple script to launch the Streamlit dashboard.

Usage:
    python run_dashboard.py
    SALES_API_URL=http://localhost:3001 python run_dashboard.py

This will start the dashboard on http://localhost:8501
"""

import subprocess
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import API_CONFIG, SRC_DIR


def main():
    app_path = SRC_DIR / "dashboard" / "app.py"

    if not app_path.exists():
        print(f"Error: Dashboard app not found at {app_path}")
        sys.exit(1)

    print("=" * 60)
    print("🍄 White Mousse - Sales Intelligence")
    print("=" * 60)
    print()
    print(f"API: {API_CONFIG['base_url']}")
    print("Open your browser to: http://localhost:8501")
    print()
    print("Press Ctrl+C to stop the server")
    print("=" * 60)

    try:
        subprocess.run([
            sys.executable, "-m", "streamlit", "run",
            str(app_path),
            "--server.headless", "true",
            "--browser.gatherUsageStats", "false"
        ])
    except KeyboardInterrupt:
        print("\n\nDashboard stopped.")


if __name__ == "__main__":
    main()
