"""skinbuild.commands - long-running serve and watch commands."""
