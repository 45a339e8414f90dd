"""
Static catalogue of Winter Projects offered for registration.

The store only keeps opaque project ids; this list is reference data for the
frontend and for labelling reports.
"""

PROJECTS = (
    {
        'id': '1',
        'title': 'Sustainable Investing: Making Portfolios Green',
        'difficulty': 'Intermediate',
        'category': 'Finance & ESG',
        'description': (
            'A comprehensive guide to integrating Environmental, Social, and Governance (ESG) '
            'principles into various investment vehicles.'
        ),
        'technologies': ['Excel', 'PowerPoint', 'ESG Frameworks', 'Financial Modeling'],
    },
    {
        'id': '2',
        'title': 'Sustainable Supply Chain Blueprint Lab',
        'difficulty': 'Intermediate',
        'category': 'Operations & Sustainability',
        'description': (
            'End-to-end supply chain sustainability mapping using Life Cycle Assessment (LCA) '
            'thinking to trace environmental and social impacts.'
        ),
        'technologies': ['Life Cycle Assessment', 'Supply Chain Mapping', 'Carbon Accounting', 'KPI Development'],
    },
    {
        'id': '3',
        'title': 'Climate Data Analytics: Corporate Carbon Modelling',
        'difficulty': 'Advanced',
        'category': 'Data Analytics & Sustainability',
        'description': (
            'Technical training in quantitative corporate sustainability management using '
            'GHG Accounting and Strategic Benchmarking.'
        ),
        'technologies': ['Excel Modeling', 'GHG Protocol', 'Carbon Accounting', 'Data Analysis'],
    },
    {
        'id': '4',
        'title': 'Corporate Sustainability: ESG Reporting & Ratings',
        'difficulty': 'Intermediate',
        'category': 'Corporate Strategy & ESG',
        'description': (
            'Practical understanding of ESG frameworks and rating systems with hands-on '
            'policy development.'
        ),
        'technologies': ['ESG Frameworks', 'Materiality Assessment', 'Stakeholder Analysis', 'Reporting Standards'],
    },
)

_BY_ID = {project['id']: project for project in PROJECTS}


def get_project(project_id):
    return _BY_ID.get(str(project_id))


def project_title(project_id):
    """Title for a project id, or the id itself when it is not in the catalogue."""
    project = get_project(project_id)
    return project['title'] if project else str(project_id)
