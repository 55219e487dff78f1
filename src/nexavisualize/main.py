"""
Application Initialization
==========================
This module wires the viewer together and starts the Qt event loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging.
2. Instantiates the Data Model (VisualizerState).
3. Instantiates the Main Window (View), passing the model in.
"""
import argparse
import sys

from PySide6.QtWidgets import QApplication

from nexavisualize.logging_config import setup_logging
from nexavisualize.model.families import resolve_family
from nexavisualize.model.state import VisualizerState
from nexavisualize.view.main_window import MainWindow


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="nexavisualize", description="3D neural-network architecture viewer.")
    parser.add_argument("--model", default=None, help="Model family or preset name, e.g. 'cnn' or 'Autoencoder'.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for edge sampling and the training simulation.")
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args(sys.argv[1:])

    # 1. Setup Logging (Console + Optional File)
    setup_logging(log_file=args.log_file, debug=args.debug)

    # 2. Create the Qt Application
    app = QApplication(sys.argv[:1])
    app.setApplicationName("Nexa Visualize")

    # 3. Initialize the Data Model
    state = VisualizerState()
    if args.model is not None:
        state.apply_preset(resolve_family(args.model))
    if args.seed is not None:
        state.seed = args.seed

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
