"""ToastTV command-line interface."""
