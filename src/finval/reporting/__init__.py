"""HTML reports for batch scans."""
