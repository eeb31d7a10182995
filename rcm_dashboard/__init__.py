"""
Revenue-Cycle Reporting — configuration-driven KPI and chart backend

Turns per-client CSV extracts (charges, payments, adjustments, denials,
open A/R) into KPI cards and chart series, as declared by each client's
JSON config document.

To swap the file store for a web server:
    Point RCM_DATA_ROOT (or the ``root`` argument) at an http(s) base URL
    serving the same configs/ and extracts/ layout. A 404 on an extract
    still degrades to an empty dataset.

To connect to Streamlit/Dash:
    Call dashboard.resolve_client(client_id) (or get_client_overview() from
    synchronous code) and render the returned bundle.

To add new KPIs:
    Add a compute function and an entry to formulas.FORMULAS, then
    reference its key from a client's ``kpis`` list.
"""
