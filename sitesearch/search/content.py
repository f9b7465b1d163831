"""Built-in site content indexed when no CONTENT_INDEX_PATH is configured."""

SITE_CONTENT = [
    # Pages
    {
        'id': 'home',
        'type': 'page',
        'title': 'South Pole - 全球领先的碳中和解决方案提供商',
        'excerpt': '专业的碳足迹评估、碳中和策略制定、碳信用交易等气候解决方案',
        'content': '南极碳中和咨询公司为全球企业和政府提供专业的碳足迹评估、碳中和策略制定、碳信用交易等气候解决方案。'
                   '助力企业实现净零排放目标，共建可持续未来。',
        'url': '/',
        'breadcrumb': ['首页'],
    },
    {
        'id': 'services',
        'type': 'page',
        'title': '服务中心',
        'excerpt': '专业的环境咨询和碳中和解决方案服务',
        'content': '我们提供全方位的可持续发展服务，包括碳足迹评估、碳中和咨询、ESG报告、绿色金融等专业服务。',
        'url': '/services',
        'breadcrumb': ['服务中心'],
    },
    {
        'id': 'about',
        'type': 'page',
        'title': '关于我们',
        'excerpt': '了解South Pole的使命、愿景和团队',
        'content': 'South Pole致力于成为全球最受信赖的气候解决方案提供商，通过创新技术和专业服务，助力全球实现碳中和目标。',
        'url': '/about',
        'breadcrumb': ['关于我们'],
    },

    # Services
    {
        'id': 'carbon-footprint-assessment',
        'type': 'service',
        'title': '碳足迹评估',
        'excerpt': '全面的企业碳排放量化评估服务，帮助企业精确掌握碳排放现状，制定科学的减排策略。',
        'content': '基于国际标准的碳足迹评估方法，为企业提供全面、准确的碳排放数据分析。'
                   '采用ISO 14064和GHG Protocol国际标准，确保数据的准确性和可比性。',
        'url': '/services/carbon-footprint-assessment',
        'category': '评估服务',
        'breadcrumb': ['服务中心', '碳足迹评估'],
    },
    {
        'id': 'carbon-neutrality-consulting',
        'type': 'service',
        'title': '碳中和咨询',
        'excerpt': '为企业制定全面的碳中和策略，提供从目标设定到实施执行的全流程咨询服务。',
        'content': '基于科学减排目标(SBTi)，为企业量身定制碳中和路径和实施方案。从策略制定到实施执行，提供全程专业指导和技术支持。',
        'url': '/services/carbon-neutrality-consulting',
        'category': '咨询服务',
        'breadcrumb': ['服务中心', '碳中和咨询'],
    },

    # News
    {
        'id': 'sustainability-innovation-award-2024',
        'type': 'news',
        'title': 'South Pole 获得 2024 年度可持续发展创新奖',
        'excerpt': '凭借在碳中和领域的突破性技术创新和卓越的客户服务，South Pole 荣获联合国环境规划署颁发的可持续发展创新奖',
        'content': '2024年3月15日，South Pole 在联合国环境规划署举办的全球可持续发展峰会上荣获"可持续发展创新奖"。'
                   '这一荣誉不仅是对我们在碳中和领域技术创新的认可，更是对整个团队多年来不懈努力的肯定。',
        'url': '/news/sustainability-innovation-award-2024',
        'category': '公司新闻',
        'publishedAt': '2024-03-15',
        'breadcrumb': ['新闻中心', '公司新闻'],
        'imageUrl': 'https://images.unsplash.com/photo-1569163139394-de4e4f43e4e3?auto=format&fit=crop&w=800&q=80',
    },
    {
        'id': 'carbon-market-trends-q1-2024',
        'type': 'news',
        'title': '全球碳市场发展趋势报告：2024年第一季度',
        'excerpt': '最新发布的全球碳市场分析显示，2024年第一季度碳信用交易量同比增长45%',
        'content': '2024年第一季度，全球碳市场呈现出强劲的增长势头。根据我们的最新分析，碳信用交易量达到了历史新高，'
                   '市场信心持续增强。交易量增长45%，平均价格稳定在25-30美元/吨区间。',
        'url': '/news/carbon-market-trends-q1-2024',
        'category': '行业洞察',
        'publishedAt': '2024-03-12',
        'breadcrumb': ['新闻中心', '行业洞察'],
        'imageUrl': 'https://images.unsplash.com/photo-1551288049-bebda4e38f71?auto=format&fit=crop&w=800&q=80',
    },

    # Cases
    {
        'id': 'case-manufacturing-company',
        'type': 'case',
        'title': '某大型制造企业碳中和案例',
        'excerpt': '成功帮助制造企业制定2030年碳中和路径，识别出15个减排机会点',
        'content': '该企业希望了解自身碳排放现状，制定2030年碳中和路径。我们采用ISO 14064标准，对企业进行全面碳足迹评估，'
                   '识别减排热点。最终完成Scope 1-3全面评估，识别出15个减排机会点，制定了详细的碳中和路径，预计可减排35%的碳排放。',
        'url': '/cases/manufacturing-company',
        'category': '制造业',
        'breadcrumb': ['案例研究', '制造业'],
    },

    # Resources
    {
        'id': 'carbon-market-report-2024',
        'type': 'resource',
        'title': '2024年碳市场趋势报告',
        'excerpt': '深度分析全球碳市场发展趋势和投资机会',
        'content': '本报告详细分析了2024年全球碳市场的发展趋势，包括各国政策变化、市场价格波动、技术创新等方面。'
                   '为企业和投资者提供专业的市场洞察和投资建议。',
        'url': '/resources/carbon-market-report-2024',
        'category': '研究报告',
        'breadcrumb': ['资源中心', '研究报告'],
    },
    {
        'id': 'esg-investment-guide',
        'type': 'resource',
        'title': 'ESG投资指南白皮书',
        'excerpt': '企业ESG投资的完整指南，涵盖评估框架和实施策略',
        'content': 'ESG投资已成为全球投资的重要趋势。本白皮书为企业提供完整的ESG投资指南，包括评估框架、实施策略、风险管理等方面的专业建议。',
        'url': '/resources/esg-investment-guide',
        'category': '白皮书',
        'breadcrumb': ['资源中心', '白皮书'],
    },
]

# Popular queries offered before the user has typed enough to search
POPULAR_SUGGESTIONS = [
    {'text': '碳中和', 'category': '服务', 'count': 156},
    {'text': '碳足迹评估', 'category': '服务', 'count': 142},
    {'text': 'ESG报告', 'category': '服务', 'count': 98},
    {'text': '绿色金融', 'category': '资源', 'count': 87},
    {'text': '可持续发展', 'category': '新闻', 'count': 76},
    {'text': '净零排放', 'category': '案例', 'count': 65},
    {'text': '碳交易', 'category': '服务', 'count': 54},
    {'text': '气候变化', 'category': '新闻', 'count': 43},
    {'text': '再生能源', 'category': '案例', 'count': 38},
    {'text': '环境咨询', 'category': '服务', 'count': 32},
]
