# Core module - configuration and logging
