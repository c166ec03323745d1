"""Skill vocabularies and synonym-based normalization."""
from __future__ import annotations

PROGRAMMING_LANGUAGES: list[str] = [
    "Python", "JavaScript", "TypeScript", "Java", "C++", "C", "C#", "Go",
    "Rust", "Ruby", "PHP", "Swift", "Kotlin", "Scala", "R", "MATLAB", "SQL",
    "Shell", "Bash", "Perl", "Dart", "Lua", "Haskell", "Elixir", "Erlang",
    "F#", "Clojure", "Julia", "Objective-C", "Assembly", "VHDL", "Verilog",
]

FRAMEWORKS: list[str] = [
    # Frontend
    "React", "Vue", "Angular", "Next.js", "Svelte", "SvelteKit", "Solid.js",
    "Qwik", "Remix", "Nuxt.js", "Astro",
    # Backend
    "Node.js", "Express", "NestJS", "Django", "Flask", "FastAPI", "Spring",
    "Spring Boot", "Rails", "Laravel", "Symfony", ".NET", "ASP.NET Core",
    # Mobile
    "React Native", "Flutter", "Ionic", "Xamarin",
    # ML/AI
    "TensorFlow", "PyTorch", "Keras", "Scikit-learn", "OpenCV",
    "Hugging Face", "LangChain",
    # Data
    "Pandas", "NumPy", "Apache Spark", "Hadoop", "Airflow", "dbt",
    # Other
    "Hibernate", "gRPC", "GraphQL", "Kafka", "RabbitMQ", "Celery",
]

TOOLS: list[str] = [
    "Git", "GitHub", "GitLab", "Bitbucket", "SVN",
    "Docker", "Kubernetes", "K8s", "Helm", "Rancher",
    "AWS", "Azure", "GCP", "Vercel", "Netlify", "Railway", "Heroku", "DigitalOcean",
    "PostgreSQL", "MySQL", "MongoDB", "Redis", "Elasticsearch", "Cassandra",
    "DynamoDB", "Supabase", "Firebase", "PlanetScale", "Neon", "SQLite", "MariaDB",
    "Jenkins", "GitHub Actions", "GitLab CI", "CircleCI", "Travis CI", "ArgoCD", "Flux",
    "Terraform", "Ansible", "Puppet", "Chef", "CloudFormation",
    "Prometheus", "Grafana", "Datadog", "New Relic", "Sentry", "Splunk",
    "Webpack", "Vite", "Rollup", "Turbopack", "esbuild", "Parcel",
    "Postman", "Insomnia", "REST", "Swagger", "OpenAPI",
    "Tableau", "Power BI", "Looker", "Databricks", "Snowflake", "Apache Kafka",
    "Jira", "Confluence", "Trello", "Asana", "Linear",
    "Figma", "Sketch", "Adobe XD",
    "Jest", "Pytest", "Selenium", "Cypress", "Playwright", "JUnit", "Mocha", "Vitest",
    "Linux", "Unix", "macOS", "Windows", "Nginx", "Apache", "Prisma", "tRPC",
]

ROLE_TYPES: list[str] = [
    "Software Engineer", "Frontend", "Backend", "Full Stack", "Mobile", "iOS",
    "Android", "DevOps", "SRE", "Data Science", "Machine Learning", "AI",
    "Data Engineering", "Data Analyst", "Security", "QA", "Testing",
    "Embedded", "Systems", "Cloud", "Infrastructure", "Product", "UX/UI",
    "Research",
]

# Variation (lower-case) -> canonical form.
SKILL_SYNONYMS: dict[str, str] = {
    "reactjs": "React", "react.js": "React", "react js": "React",
    "node": "Node.js", "nodejs": "Node.js", "node js": "Node.js",
    "vuejs": "Vue", "vue.js": "Vue", "vue js": "Vue",
    "angularjs": "Angular", "angular.js": "Angular", "angular js": "Angular",
    "js": "JavaScript", "javascript": "JavaScript", "ecmascript": "JavaScript",
    "ts": "TypeScript", "typescript": "TypeScript",
    "python": "Python", "python3": "Python", "py": "Python",
    "java": "Java",  # not JavaScript
    "k8s": "Kubernetes", "kube": "Kubernetes",
    "postgres": "PostgreSQL", "postgresql": "PostgreSQL", "psql": "PostgreSQL",
    "mongo": "MongoDB", "mongodb": "MongoDB",
    "amazon web services": "AWS", "aws": "AWS",
    "google cloud": "GCP", "google cloud platform": "GCP", "gcp": "GCP",
    "azure": "Azure", "microsoft azure": "Azure",
    "dotnet": ".NET", "dot net": ".NET", ".net": ".NET",
    "asp.net": "ASP.NET Core", "aspnet": "ASP.NET Core",
    "continuous integration": "CI/CD", "continuous deployment": "CI/CD",
    "ci/cd": "CI/CD", "cicd": "CI/CD",
    "ml": "Machine Learning", "machine learning": "Machine Learning",
    "ai": "AI", "artificial intelligence": "AI",
    "front-end": "Frontend", "front end": "Frontend", "frontend": "Frontend",
    "back-end": "Backend", "back end": "Backend", "backend": "Backend",
    "fullstack": "Full Stack", "full-stack": "Full Stack", "full stack": "Full Stack",
    "git": "Git", "github": "GitHub", "gitlab": "GitLab",
    "docker": "Docker", "containers": "Docker",
    "sql": "SQL", "mysql": "MySQL", "mssql": "SQL", "sql server": "SQL",
    "graphql": "GraphQL", "graph ql": "GraphQL",
    "rest": "REST", "rest api": "REST", "restful": "REST", "restful api": "REST",
    "redux": "Redux", "redux toolkit": "Redux",
    "tensorflow": "TensorFlow", "tf": "TensorFlow",
    "pytorch": "PyTorch", "torch": "PyTorch",
    "c++": "C++", "cpp": "C++", "cplusplus": "C++",
    "c#": "C#", "csharp": "C#", "c sharp": "C#",
    "springboot": "Spring Boot", "spring boot": "Spring Boot",
    "nextjs": "Next.js", "next.js": "Next.js", "next js": "Next.js",
    "sveltejs": "Svelte", "svelte.js": "Svelte",
    "tailwind": "Tailwind CSS", "tailwindcss": "Tailwind CSS", "tailwind css": "Tailwind CSS",
}


def normalize_skill(skill: str) -> str:
    """Canonical form of *skill*, or *skill* unchanged when it has no synonym.

    Canonical values either map to themselves or are absent from the table,
    so ``normalize_skill(normalize_skill(x)) == normalize_skill(x)``.
    """
    return SKILL_SYNONYMS.get((skill or "").lower().strip(), skill)


def canonical_key(skill: str) -> str:
    """Case-insensitive comparison key: normalized then lower-cased."""
    return normalize_skill(skill).lower().strip()
